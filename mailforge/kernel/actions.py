"""
Mailforge Kernel - Action Construction

Factory functions for well-formed reducer actions. The reducer only reads
Action.type and Action.payload; these helpers fix the payload shapes so
callers and tests do not spell them by hand.

Payload keys are snake_case. Sections and blocks are passed as model
objects (their dict form is accepted too).
"""

from __future__ import annotations

from typing import Any

from mailforge.kernel.types import Action, Block, Section, Selection, Template

# ---------------------------------------------------------------------------
# Action types
# ---------------------------------------------------------------------------

SET_TEMPLATE = "SET_TEMPLATE"
ADD_SECTION = "ADD_SECTION"
REMOVE_SECTION = "REMOVE_SECTION"
MOVE_SECTION = "MOVE_SECTION"
UPDATE_SECTION = "UPDATE_SECTION"
ADD_BLOCK = "ADD_BLOCK"
REMOVE_BLOCK = "REMOVE_BLOCK"
MOVE_BLOCK = "MOVE_BLOCK"
UPDATE_BLOCK = "UPDATE_BLOCK"
SELECT_BLOCK = "SELECT_BLOCK"
SELECT_SECTION = "SELECT_SECTION"
SET_ACTIVE_TAB = "SET_ACTIVE_TAB"
UPDATE_GLOBAL_STYLES = "UPDATE_GLOBAL_STYLES"
UPDATE_HEAD_METADATA = "UPDATE_HEAD_METADATA"
DUPLICATE_BLOCK = "DUPLICATE_BLOCK"
DUPLICATE_SECTION = "DUPLICATE_SECTION"
ADD_BLOCK_AND_SELECT = "ADD_BLOCK_AND_SELECT"
ADD_SECTION_WITH_BLOCK = "ADD_SECTION_WITH_BLOCK"
DESELECT_ALL = "DESELECT_ALL"
UNDO = "UNDO"
REDO = "REDO"
PUSH_HISTORY = "PUSH_HISTORY"


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def set_template(template: Template | dict[str, Any]) -> Action:
    return Action(SET_TEMPLATE, template)


def add_section(section: Section, index: int | None = None) -> Action:
    return Action(ADD_SECTION, {"section": section, "index": index})


def remove_section(section_id: str) -> Action:
    return Action(REMOVE_SECTION, {"section_id": section_id})


def move_section(section_id: str, to_index: int) -> Action:
    return Action(MOVE_SECTION, {"section_id": section_id, "to_index": to_index})


def update_section(section_id: str, properties: dict[str, Any]) -> Action:
    return Action(UPDATE_SECTION, {"section_id": section_id, "properties": properties})


def add_block(section_id: str, column_id: str, block: Block, index: int | None = None) -> Action:
    return Action(ADD_BLOCK, {"section_id": section_id, "column_id": column_id, "block": block, "index": index})


def remove_block(section_id: str, column_id: str, block_id: str) -> Action:
    return Action(REMOVE_BLOCK, {"section_id": section_id, "column_id": column_id, "block_id": block_id})


def move_block(
    block_id: str,
    *,
    from_section_id: str,
    from_column_id: str,
    to_section_id: str,
    to_column_id: str,
    to_index: int,
) -> Action:
    """
    to_index is the position in the target column as the caller sees it
    before the move; the reducer adjusts it for same-column moves.
    """
    return Action(
        MOVE_BLOCK,
        {
            "block_id": block_id,
            "from_section_id": from_section_id,
            "from_column_id": from_column_id,
            "to_section_id": to_section_id,
            "to_column_id": to_column_id,
            "to_index": to_index,
        },
    )


def update_block(block_id: str, properties: dict[str, Any]) -> Action:
    """Located through the block index, so no section/column ids are needed."""
    return Action(UPDATE_BLOCK, {"block_id": block_id, "properties": properties})


def select_block(section_id: str, column_id: str, block_id: str) -> Action:
    return Action(SELECT_BLOCK, Selection(section_id=section_id, column_id=column_id, block_id=block_id))


def select_section(section_id: str | None) -> Action:
    return Action(SELECT_SECTION, {"section_id": section_id} if section_id else None)


def deselect_all() -> Action:
    return Action(DESELECT_ALL)


def set_active_tab(tab: str) -> Action:
    return Action(SET_ACTIVE_TAB, tab)


def update_global_styles(**styles: Any) -> Action:
    """Keyword names are the camelCase interchange keys: backgroundColor, width, fontFamily."""
    return Action(UPDATE_GLOBAL_STYLES, styles)


def update_head_metadata(**metadata: Any) -> Action:
    """Keyword names are the camelCase interchange keys: title, previewText, headStyles."""
    return Action(UPDATE_HEAD_METADATA, metadata)


def duplicate_block(section_id: str, column_id: str, block_id: str) -> Action:
    return Action(DUPLICATE_BLOCK, {"section_id": section_id, "column_id": column_id, "block_id": block_id})


def duplicate_section(section_id: str) -> Action:
    return Action(DUPLICATE_SECTION, {"section_id": section_id})


def add_block_and_select(section_id: str, column_id: str, block: Block, index: int | None = None) -> Action:
    return Action(
        ADD_BLOCK_AND_SELECT,
        {"section_id": section_id, "column_id": column_id, "block": block, "index": index},
    )


def add_section_with_block(section: Section, block: Block, index: int | None = None) -> Action:
    return Action(ADD_SECTION_WITH_BLOCK, {"section": section, "block": block, "index": index})


def undo() -> Action:
    return Action(UNDO)


def redo() -> Action:
    return Action(REDO)


def push_history() -> Action:
    return Action(PUSH_HISTORY)
