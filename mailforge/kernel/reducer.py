"""
Mailforge Kernel - Reducer

Pure function: (state, action) -> state
No side effects. No IO. Never raises.

Action categories:

  structural   push history (dropping the redo branch, evicting the oldest
               entry past max_history), rebuild the block index, mark dirty,
               repair the selection
  debounced    UPDATE_BLOCK / UPDATE_SECTION / UPDATE_GLOBAL_STYLES /
               UPDATE_HEAD_METADATA: merge into the template, no history,
               index reused. The caller commits with PUSH_HISTORY.
  selection    SELECT_*, DESELECT_ALL, SET_ACTIVE_TAB: selection/tab only
  history      UNDO / REDO move the cursor, PUSH_HISTORY commits

An action that has no effect (unknown type, missing id, malformed payload,
undo at the start of history) returns the very same state object, so
callers can detect it with `is`.

Templates are copied on write. Untouched sections, columns and blocks are
shared between consecutive states and must never be mutated in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from mailforge.kernel import actions as A
from mailforge.kernel.block_index import build_block_index
from mailforge.kernel.defaults import MAX_HISTORY_SIZE
from mailforge.kernel.factory import clone_block, clone_section
from mailforge.kernel.registry import BlockRegistry
from mailforge.kernel.types import (
    ACTIVE_TABS,
    EMPTY_SELECTION,
    Action,
    Block,
    Column,
    EditorState,
    GlobalStyles,
    HeadMetadata,
    Section,
    Selection,
    Template,
)
from mailforge.kernel.validate import sanitize_template

logger = logging.getLogger(__name__)

DEBOUNCE_ELIGIBLE: frozenset[str] = frozenset(
    {A.UPDATE_BLOCK, A.UPDATE_SECTION, A.UPDATE_GLOBAL_STYLES, A.UPDATE_HEAD_METADATA}
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_initial_state(
    template: Template | None = None,
    *,
    max_history: int = MAX_HISTORY_SIZE,
    registry: BlockRegistry | None = None,
) -> EditorState:
    """
    A clean state whose only history entry is `template` (an empty one by default).

    `registry` decides which block types survive SET_TEMPLATE; it travels
    with every state derived from this one.
    """
    t = template if template is not None else Template()
    return EditorState(
        template=t,
        history=(t,),
        history_index=0,
        is_dirty=False,
        block_index=build_block_index(t.sections),
        max_history=max(1, max_history),
        registry=registry,
    )


def reduce(state: EditorState, action: Action) -> EditorState:
    handler = _HANDLERS.get(action.type)
    if handler is None:
        logger.debug("Ignoring unknown action type %r", action.type)
        return state
    try:
        return handler(state, action.payload)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        logger.debug("Ignoring %s with malformed payload: %s", action.type, e)
        return state


def can_undo(state: EditorState) -> bool:
    return state.can_undo


def can_redo(state: EditorState) -> bool:
    return state.can_redo


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _push_history(state: EditorState, template: Template, selection: Selection | None = None) -> EditorState:
    history = state.history[: state.history_index + 1] + (template,)
    if len(history) > state.max_history:
        history = history[-state.max_history :]
    block_index = build_block_index(template.sections)
    return replace(
        state,
        template=template,
        history=history,
        history_index=len(history) - 1,
        is_dirty=True,
        block_index=block_index,
        selection=_repair_selection(selection if selection is not None else state.selection, block_index, template),
    )


def _apply_without_history(state: EditorState, template: Template) -> EditorState:
    return replace(state, template=template, is_dirty=True)


def _repair_selection(selection: Selection, block_index: dict, template: Template) -> Selection:
    if selection.block_id:
        loc = block_index.get(selection.block_id)
        if loc is None:
            return EMPTY_SELECTION
        if selection.section_id != loc.section_id or selection.column_id != loc.column_id:
            return Selection(section_id=loc.section_id, column_id=loc.column_id, block_id=selection.block_id)
        return selection
    if selection.section_id:
        if not any(s.id == selection.section_id for s in template.sections):
            return EMPTY_SELECTION
    return selection


def _with_sections(template: Template, sections: list[Section]) -> Template:
    return replace(template, sections=sections)


def _find_section(template: Template, section_id: str) -> int:
    for i, section in enumerate(template.sections):
        if section.id == section_id:
            return i
    return -1


def _find_column(section: Section, column_id: str) -> int:
    for i, column in enumerate(section.columns):
        if column.id == column_id:
            return i
    return -1


def _find_block(column: Column, block_id: str) -> int:
    for i, block in enumerate(column.blocks):
        if block.id == block_id:
            return i
    return -1


def _locate_column(template: Template, section_id: str, column_id: str) -> tuple[int, int]:
    si = _find_section(template, section_id)
    if si == -1:
        return -1, -1
    return si, _find_column(template.sections[si], column_id)


def _replace_column(template: Template, si: int, ci: int, blocks: list[Block]) -> Template:
    """New template where sections[si].columns[ci] holds `blocks`; everything else shared."""
    section = template.sections[si]
    columns = list(section.columns)
    columns[ci] = replace(columns[ci], blocks=blocks)
    sections = list(template.sections)
    sections[si] = replace(section, columns=columns)
    return _with_sections(template, sections)


def _insert_at(items: list, index: int | None, item: Any) -> list:
    out = list(items)
    position = len(out) if index is None else max(0, min(int(index), len(out)))
    out.insert(position, item)
    return out


def _as_section(value: Any) -> Section:
    return value if isinstance(value, Section) else Section.from_dict(value)


def _as_block(value: Any) -> Block:
    return value if isinstance(value, Block) else Block.from_dict(value)


# ---------------------------------------------------------------------------
# Structural actions
# ---------------------------------------------------------------------------


def _set_template(state: EditorState, payload: Any) -> EditorState:
    return _push_history(state, sanitize_template(payload, state.registry))


def _add_section(state: EditorState, payload: dict) -> EditorState:
    section = _as_section(payload["section"])
    sections = _insert_at(state.template.sections, payload.get("index"), section)
    return _push_history(state, _with_sections(state.template, sections))


def _remove_section(state: EditorState, payload: dict) -> EditorState:
    section_id = payload["section_id"]
    if _find_section(state.template, section_id) == -1:
        return state
    sections = [s for s in state.template.sections if s.id != section_id]
    return _push_history(state, _with_sections(state.template, sections))


def _move_section(state: EditorState, payload: dict) -> EditorState:
    from_index = _find_section(state.template, payload["section_id"])
    if from_index == -1:
        return state
    sections = list(state.template.sections)
    moved = sections.pop(from_index)
    sections = _insert_at(sections, payload["to_index"], moved)
    return _push_history(state, _with_sections(state.template, sections))


def _add_block(state: EditorState, payload: dict, *, select: bool = False) -> EditorState:
    si, ci = _locate_column(state.template, payload["section_id"], payload["column_id"])
    if si == -1 or ci == -1:
        return state
    block = _as_block(payload["block"])
    column = state.template.sections[si].columns[ci]
    template = _replace_column(state.template, si, ci, _insert_at(column.blocks, payload.get("index"), block))
    selection = None
    if select:
        selection = Selection(section_id=payload["section_id"], column_id=payload["column_id"], block_id=block.id)
    return _push_history(state, template, selection)


def _add_block_and_select(state: EditorState, payload: dict) -> EditorState:
    return _add_block(state, payload, select=True)


def _remove_block(state: EditorState, payload: dict) -> EditorState:
    si, ci = _locate_column(state.template, payload["section_id"], payload["column_id"])
    if si == -1 or ci == -1:
        return state
    column = state.template.sections[si].columns[ci]
    if _find_block(column, payload["block_id"]) == -1:
        return state
    blocks = [b for b in column.blocks if b.id != payload["block_id"]]
    return _push_history(state, _replace_column(state.template, si, ci, blocks))


def _move_block(state: EditorState, payload: dict) -> EditorState:
    block_id = payload["block_id"]
    from_si, from_ci = _locate_column(state.template, payload["from_section_id"], payload["from_column_id"])
    to_si, to_ci = _locate_column(state.template, payload["to_section_id"], payload["to_column_id"])
    if -1 in (from_si, from_ci, to_si, to_ci):
        return state

    source = state.template.sections[from_si].columns[from_ci]
    from_index = _find_block(source, block_id)
    if from_index == -1:
        return state

    # Removing the block first shifts later positions in the same column down by one
    to_index = int(payload["to_index"])
    if (from_si, from_ci) == (to_si, to_ci) and from_index < to_index:
        to_index -= 1

    moved = source.blocks[from_index]
    template = _replace_column(state.template, from_si, from_ci, [b for b in source.blocks if b.id != block_id])
    target = template.sections[to_si].columns[to_ci]
    template = _replace_column(template, to_si, to_ci, _insert_at(target.blocks, to_index, moved))
    return _push_history(state, template)


def _duplicate_block(state: EditorState, payload: dict) -> EditorState:
    si, ci = _locate_column(state.template, payload["section_id"], payload["column_id"])
    if si == -1 or ci == -1:
        return state
    column = state.template.sections[si].columns[ci]
    bi = _find_block(column, payload["block_id"])
    if bi == -1:
        return state
    blocks = _insert_at(column.blocks, bi + 1, clone_block(column.blocks[bi]))
    return _push_history(state, _replace_column(state.template, si, ci, blocks))


def _duplicate_section(state: EditorState, payload: dict) -> EditorState:
    si = _find_section(state.template, payload["section_id"])
    if si == -1:
        return state
    sections = _insert_at(state.template.sections, si + 1, clone_section(state.template.sections[si]))
    return _push_history(state, _with_sections(state.template, sections))


def _add_section_with_block(state: EditorState, payload: dict) -> EditorState:
    section = _as_section(payload["section"])
    block = _as_block(payload["block"])
    if not section.columns:
        return state
    columns = list(section.columns)
    columns[0] = replace(columns[0], blocks=[*columns[0].blocks, block])
    sections = _insert_at(state.template.sections, payload.get("index"), replace(section, columns=columns))
    return _push_history(state, _with_sections(state.template, sections))


# ---------------------------------------------------------------------------
# Debounced property actions
# ---------------------------------------------------------------------------


def _update_block(state: EditorState, payload: dict) -> EditorState:
    block_id = payload["block_id"]
    properties = payload["properties"]
    if not isinstance(properties, dict):
        return state
    loc = state.block_index.get(block_id)
    if loc is None:
        return state
    si, ci = _locate_column(state.template, loc.section_id, loc.column_id)
    if si == -1 or ci == -1:
        return state
    column = state.template.sections[si].columns[ci]
    blocks = [
        replace(b, properties={**b.properties, **properties}) if b.id == block_id else b for b in column.blocks
    ]
    return _apply_without_history(state, _replace_column(state.template, si, ci, blocks))


def _update_section(state: EditorState, payload: dict) -> EditorState:
    section_id = payload["section_id"]
    properties = payload["properties"]
    if not isinstance(properties, dict):
        return state
    si = _find_section(state.template, section_id)
    if si == -1:
        return state
    sections = list(state.template.sections)
    sections[si] = replace(sections[si], properties={**sections[si].properties, **properties})
    return _apply_without_history(state, _with_sections(state.template, sections))


def _update_global_styles(state: EditorState, payload: dict) -> EditorState:
    if not isinstance(payload, dict):
        return state
    merged = {**state.template.global_styles.to_dict(), **payload}
    return _apply_without_history(state, replace(state.template, global_styles=GlobalStyles.from_dict(merged)))


def _update_head_metadata(state: EditorState, payload: dict) -> EditorState:
    if not isinstance(payload, dict):
        return state
    merged = {**state.template.head_metadata.to_dict(), **payload}
    return _apply_without_history(state, replace(state.template, head_metadata=HeadMetadata.from_dict(merged)))


# ---------------------------------------------------------------------------
# Selection actions
# ---------------------------------------------------------------------------


def _select_block(state: EditorState, payload: Any) -> EditorState:
    if payload is None:
        return replace(state, selection=EMPTY_SELECTION)
    if isinstance(payload, Selection):
        return replace(state, selection=payload)
    return replace(
        state,
        selection=Selection(
            section_id=payload.get("section_id"),
            column_id=payload.get("column_id"),
            block_id=payload.get("block_id"),
        ),
    )


def _select_section(state: EditorState, payload: Any) -> EditorState:
    if not payload:
        return replace(state, selection=EMPTY_SELECTION)
    return replace(state, selection=Selection(section_id=payload["section_id"]))


def _deselect_all(state: EditorState, payload: Any) -> EditorState:
    return replace(state, selection=EMPTY_SELECTION)


def _set_active_tab(state: EditorState, payload: Any) -> EditorState:
    if payload not in ACTIVE_TABS:
        return state
    return replace(state, active_tab=payload)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def _move_cursor(state: EditorState, new_index: int) -> EditorState:
    restored = state.history[new_index]
    block_index = build_block_index(restored.sections)
    return replace(
        state,
        template=restored,
        history_index=new_index,
        block_index=block_index,
        selection=_repair_selection(state.selection, block_index, restored),
    )


def _undo(state: EditorState, payload: Any) -> EditorState:
    if state.history_index <= 0:
        return state
    return _move_cursor(state, state.history_index - 1)


def _redo(state: EditorState, payload: Any) -> EditorState:
    if state.history_index >= len(state.history) - 1:
        return state
    return _move_cursor(state, state.history_index + 1)


def _commit(state: EditorState, payload: Any) -> EditorState:
    if state.template is state.history[state.history_index]:
        return state
    return _push_history(state, state.template)


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Callable[[EditorState, Any], EditorState]] = {
    A.SET_TEMPLATE: _set_template,
    A.ADD_SECTION: _add_section,
    A.REMOVE_SECTION: _remove_section,
    A.MOVE_SECTION: _move_section,
    A.UPDATE_SECTION: _update_section,
    A.ADD_BLOCK: _add_block,
    A.REMOVE_BLOCK: _remove_block,
    A.MOVE_BLOCK: _move_block,
    A.UPDATE_BLOCK: _update_block,
    A.SELECT_BLOCK: _select_block,
    A.SELECT_SECTION: _select_section,
    A.SET_ACTIVE_TAB: _set_active_tab,
    A.UPDATE_GLOBAL_STYLES: _update_global_styles,
    A.UPDATE_HEAD_METADATA: _update_head_metadata,
    A.DUPLICATE_BLOCK: _duplicate_block,
    A.DUPLICATE_SECTION: _duplicate_section,
    A.ADD_BLOCK_AND_SELECT: _add_block_and_select,
    A.ADD_SECTION_WITH_BLOCK: _add_section_with_block,
    A.DESELECT_ALL: _deselect_all,
    A.UNDO: _undo,
    A.REDO: _redo,
    A.PUSH_HISTORY: _commit,
}
