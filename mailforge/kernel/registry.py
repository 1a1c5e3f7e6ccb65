"""
Mailforge Kernel - Block Type Registry

Maps a block type to the four functions the kernel needs for it:

  parse(element)             -> Block | None    markup element -> block
  generate(block, indent, now) -> str           block -> markup text
  validate(properties)       -> list[str]       shape defects, [] when fine
  defaults()                 -> dict            fresh default properties

The parser finds a handler either through an `ee-block-<type>` css-class
marker on the element or through the element's tag. The validator, the
sanitizer and the generator only ever go through the registry, so a new
block type needs nothing more than a register() call.

A process-wide registry holding the built-ins is created on first use by
get_default_registry(). Callers that need isolation build their own with
default_registry().
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from mailforge.kernel.defaults import block_defaults
from mailforge.kernel.types import BUILT_IN_BLOCK_TYPES, Block

if TYPE_CHECKING:
    from lxml import etree

MARKER_PREFIX = "ee-block-"

ParseFn = Callable[["etree._Element"], "Block | None"]
GenerateFn = Callable[[Block, str, datetime], str]
ValidateFn = Callable[[dict[str, Any]], list[str]]
DefaultsFn = Callable[[], dict[str, Any]]


@dataclass(frozen=True)
class BlockTypeHandler:
    """Everything the kernel knows about one block type."""

    type: str
    parse: ParseFn | None = None
    generate: GenerateFn | None = None
    validate: ValidateFn | None = None
    defaults: DefaultsFn | None = None
    tags: tuple[str, ...] = ()  # dialect tags this handler parses by default


class BlockRegistry:
    def __init__(self, handlers: Iterable[BlockTypeHandler] = ()) -> None:
        self._handlers: dict[str, BlockTypeHandler] = {}
        self._tag_handlers: dict[str, BlockTypeHandler] = {}
        for handler in handlers:
            self.register(handler)

    def register(self, handler: BlockTypeHandler) -> None:
        """Add or replace the handler for handler.type. Later tag claims win."""
        self._handlers[handler.type] = handler
        for tag in handler.tags:
            self._tag_handlers[tag] = handler

    def get(self, block_type: str) -> BlockTypeHandler | None:
        return self._handlers.get(block_type)

    def types(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def is_known(self, block_type: Any) -> bool:
        if not isinstance(block_type, str):
            return False
        return block_type in BUILT_IN_BLOCK_TYPES or block_type in self._handlers

    def defaults_for(self, block_type: str) -> dict[str, Any]:
        handler = self._handlers.get(block_type)
        if handler is not None and handler.defaults is not None:
            return handler.defaults()
        return block_defaults(block_type)

    def handler_for_element(self, tag: str, css_classes: Iterable[str] = ()) -> BlockTypeHandler | None:
        """A registered marker class wins over the tag's default parser."""
        for cls in css_classes:
            if cls.startswith(MARKER_PREFIX):
                handler = self._handlers.get(cls[len(MARKER_PREFIX):])
                if handler is not None and handler.parse is not None:
                    return handler
        return self._tag_handlers.get(tag)

    def copy(self) -> BlockRegistry:
        return BlockRegistry(self._handlers.values())


def default_registry() -> BlockRegistry:
    """A fresh registry holding the built-in block types."""
    from mailforge.kernel.blocks import BUILT_IN_HANDLERS

    return BlockRegistry(BUILT_IN_HANDLERS)


_DEFAULT_REGISTRY: BlockRegistry | None = None


def get_default_registry() -> BlockRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = default_registry()
    return _DEFAULT_REGISTRY
