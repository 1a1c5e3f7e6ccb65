"""
Mailforge Kernel - the editor engine.

Components:
  types       - Template, Section, Column, Block, EditorState
  reducer     - (state, action) -> state  (pure, copy-on-write, undo history)
  parser      - MJML text -> Template
  generator   - Template -> MJML text
  validate    - structural validation and repair of untrusted templates
  registry    - per-block-type parse/generate/validate/defaults
  assembly    - EditorSession: reducer + debounce timers + storage
"""

from mailforge.kernel.assembly import EditorSession
from mailforge.kernel.errors import MailforgeError, ParseError, StorageError
from mailforge.kernel.factory import create_block, create_section, create_section_with_block
from mailforge.kernel.generator import generate_mjml
from mailforge.kernel.parser import parse_mjml
from mailforge.kernel.reducer import can_redo, can_undo, create_initial_state, reduce
from mailforge.kernel.registry import BlockRegistry, BlockTypeHandler, get_default_registry
from mailforge.kernel.storage import FileStorage, MemoryStorage, TemplateStorage
from mailforge.kernel.types import (
    Action,
    Block,
    Column,
    EditorState,
    GlobalStyles,
    HeadMetadata,
    Section,
    Selection,
    Template,
    ValidationResult,
    Variable,
)
from mailforge.kernel.validate import sanitize_template, validate_template

__all__ = [
    "Action",
    "Block",
    "Column",
    "EditorState",
    "GlobalStyles",
    "HeadMetadata",
    "Section",
    "Selection",
    "Template",
    "ValidationResult",
    "Variable",
    "reduce",
    "create_initial_state",
    "can_undo",
    "can_redo",
    "parse_mjml",
    "generate_mjml",
    "validate_template",
    "sanitize_template",
    "create_block",
    "create_section",
    "create_section_with_block",
    "BlockRegistry",
    "BlockTypeHandler",
    "get_default_registry",
    "TemplateStorage",
    "MemoryStorage",
    "FileStorage",
    "EditorSession",
    "MailforgeError",
    "ParseError",
    "StorageError",
]
