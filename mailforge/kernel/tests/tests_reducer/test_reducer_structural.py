"""
Mailforge Reducer -- Structural Actions

One test per structural action. Each must push history, rebuild the block
index, mark the state dirty, and leave untouched subtrees shared.
Actions naming missing ids return the very same state object.
"""

import pytest

from mailforge.kernel import actions as A
from mailforge.kernel.block_index import build_block_index
from mailforge.kernel.factory import create_block, create_section
from mailforge.kernel.reducer import create_initial_state, reduce
from mailforge.kernel.registry import BlockTypeHandler, default_registry
from mailforge.kernel.types import Action, Template

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def state(two_column_template):
    """Two-column section plus a second empty section."""
    template = Template(sections=[*two_column_template.sections, create_section()])
    return create_initial_state(template)


def ids(state):
    s = state.template.sections[0]
    left, right = s.columns
    return s.id, left.id, right.id, [b.id for b in left.blocks], [b.id for b in right.blocks]


def assert_index_consistent(state):
    assert state.block_index == build_block_index(state.template.sections)


def assert_structural(before, after):
    assert after is not before
    assert after.is_dirty
    assert after.history[after.history_index] is after.template
    assert after.history_index == before.history_index + 1
    assert_index_consistent(after)


# ============================================================================
# Sections
# ============================================================================


class TestSectionActions:
    def test_add_section_appends(self, state):
        section = create_section()
        after = reduce(state, A.add_section(section))
        assert_structural(state, after)
        assert after.template.sections[-1] is section

    def test_add_section_at_index(self, state):
        section = create_section()
        after = reduce(state, A.add_section(section, index=0))
        assert after.template.sections[0] is section

    def test_add_section_index_clamped(self, state):
        section = create_section()
        after = reduce(state, A.add_section(section, index=99))
        assert after.template.sections[-1] is section

    def test_add_section_from_dict(self, state):
        section = create_section()
        after = reduce(state, A.add_section(section.to_dict()))
        assert after.template.sections[-1].id == section.id

    def test_remove_section(self, state):
        sid = state.template.sections[0].id
        after = reduce(state, A.remove_section(sid))
        assert_structural(state, after)
        assert [s.id for s in after.template.sections] == [state.template.sections[1].id]
        assert after.block_index == {}

    def test_move_section(self, state):
        first, second = (s.id for s in state.template.sections)
        after = reduce(state, A.move_section(first, 1))
        assert_structural(state, after)
        assert [s.id for s in after.template.sections] == [second, first]

    def test_duplicate_section(self, state):
        original = state.template.sections[0]
        after = reduce(state, A.duplicate_section(original.id))
        assert_structural(state, after)
        copy = after.template.sections[1]
        assert copy.id != original.id
        assert len(after.block_index) == 6
        assert [[b.type for b in c.blocks] for c in copy.columns] == [["text", "button"], ["image"]]

    def test_add_section_with_block(self, state):
        section = create_section()
        block = create_block("spacer")
        after = reduce(state, A.add_section_with_block(section, block, index=1))
        assert_structural(state, after)
        added = after.template.sections[1]
        assert added.id == section.id
        assert added.columns[0].blocks[0] is block
        assert section.columns[0].blocks == []

    def test_set_template_sanitizes(self, state):
        after = reduce(state, A.set_template({"sections": [{"id": "s1", "columns": [{"id": "c1", "blocks": [{"id": "b1", "type": "text", "properties": {}}, {"id": "b2", "type": "nope", "properties": {}}]}]}]}))
        assert_structural(state, after)
        assert [b.id for b in after.template.sections[0].columns[0].blocks] == ["b1"]
        assert after.template.sections[0].columns[0].blocks[0].properties["fontSize"] == "14px"

    def test_set_template_keeps_registered_types(self):
        registry = default_registry()
        registry.register(BlockTypeHandler(type="carousel", defaults=lambda: {"slides": []}))
        state = reduce(create_initial_state(registry=registry), A.add_section(create_section()))
        assert state.registry is registry
        raw = {"sections": [{"id": "s1", "columns": [{"id": "c1", "blocks": [{"id": "b1", "type": "carousel", "properties": {}}]}]}]}
        after = reduce(state, A.set_template(raw))
        block = after.template.sections[0].columns[0].blocks[0]
        assert (block.type, block.properties) == ("carousel", {"slides": []})
        assert reduce(create_initial_state(), A.set_template(raw)).template.sections[0].columns[0].blocks == []


# ============================================================================
# Blocks
# ============================================================================


class TestBlockActions:
    def test_add_block(self, state):
        sid, left, _, left_blocks, _ = ids(state)
        block = create_block("divider")
        after = reduce(state, A.add_block(sid, left, block, index=1))
        assert_structural(state, after)
        assert [b.id for b in after.template.sections[0].columns[0].blocks] == [left_blocks[0], block.id, left_blocks[1]]
        assert after.selection == state.selection

    def test_add_block_and_select(self, state):
        sid, _, right, _, _ = ids(state)
        block = create_block("spacer")
        after = reduce(state, A.add_block_and_select(sid, right, block))
        assert after.template.sections[0].columns[1].blocks[-1] is block
        assert (after.selection.section_id, after.selection.column_id, after.selection.block_id) == (sid, right, block.id)

    def test_remove_block(self, state):
        sid, left, _, left_blocks, _ = ids(state)
        after = reduce(state, A.remove_block(sid, left, left_blocks[0]))
        assert_structural(state, after)
        assert left_blocks[0] not in after.block_index
        assert [b.id for b in after.template.sections[0].columns[0].blocks] == [left_blocks[1]]

    def test_duplicate_block_inserted_after_original(self, state):
        sid, left, _, left_blocks, _ = ids(state)
        after = reduce(state, A.duplicate_block(sid, left, left_blocks[0]))
        assert_structural(state, after)
        blocks = after.template.sections[0].columns[0].blocks
        assert len(blocks) == 3
        assert blocks[0].id == left_blocks[0]
        assert blocks[1].type == "text"
        assert blocks[1].id not in left_blocks
        assert blocks[1].properties == blocks[0].properties
        assert blocks[1].properties is not blocks[0].properties

    def test_move_block_across_columns(self, state):
        sid, left, right, left_blocks, right_blocks = ids(state)
        after = reduce(
            state,
            A.move_block(left_blocks[1], from_section_id=sid, from_column_id=left, to_section_id=sid, to_column_id=right, to_index=0),
        )
        assert_structural(state, after)
        columns = after.template.sections[0].columns
        assert [b.id for b in columns[0].blocks] == [left_blocks[0]]
        assert [b.id for b in columns[1].blocks] == [left_blocks[1], right_blocks[0]]
        assert after.block_index[left_blocks[1]].column_id == right

    def test_move_block_across_sections(self, state):
        sid, left, _, left_blocks, _ = ids(state)
        target = state.template.sections[1]
        after = reduce(
            state,
            A.move_block(
                left_blocks[0],
                from_section_id=sid,
                from_column_id=left,
                to_section_id=target.id,
                to_column_id=target.columns[0].id,
                to_index=0,
            ),
        )
        assert after.block_index[left_blocks[0]].section_id == target.id

    def test_move_block_down_same_column(self):
        section = create_section()
        blocks = [create_block("text") for _ in range(4)]
        section.columns[0].blocks.extend(blocks)
        state = create_initial_state(Template(sections=[section]))
        col = section.columns[0].id
        # Drop the first block between the third and fourth (visual index 3)
        after = reduce(
            state,
            A.move_block(blocks[0].id, from_section_id=section.id, from_column_id=col, to_section_id=section.id, to_column_id=col, to_index=3),
        )
        order = [b.id for b in after.template.sections[0].columns[0].blocks]
        assert order == [blocks[1].id, blocks[2].id, blocks[0].id, blocks[3].id]

    def test_move_block_up_same_column(self):
        section = create_section()
        blocks = [create_block("text") for _ in range(3)]
        section.columns[0].blocks.extend(blocks)
        state = create_initial_state(Template(sections=[section]))
        col = section.columns[0].id
        after = reduce(
            state,
            A.move_block(blocks[2].id, from_section_id=section.id, from_column_id=col, to_section_id=section.id, to_column_id=col, to_index=0),
        )
        assert [b.id for b in after.template.sections[0].columns[0].blocks] == [blocks[2].id, blocks[0].id, blocks[1].id]


# ============================================================================
# Copy on write
# ============================================================================


class TestCopyOnWrite:
    """Reductions never mutate the previous template."""

    def test_previous_template_untouched(self, state):
        before = state.template.to_dict()
        sid, left, _, left_blocks, _ = ids(state)
        after = reduce(state, A.remove_block(sid, left, left_blocks[0]))
        after = reduce(after, A.update_block(left_blocks[1], {"text": "Changed"}))
        assert state.template.to_dict() == before

    def test_untouched_subtrees_shared(self, state):
        sid, left, _, left_blocks, _ = ids(state)
        after = reduce(state, A.remove_block(sid, left, left_blocks[0]))
        assert after.template.sections[1] is state.template.sections[1]
        assert after.template.sections[0].columns[1] is state.template.sections[0].columns[1]


# ============================================================================
# No-ops
# ============================================================================


class TestNoOps:
    """Missing ids, unknown types and malformed payloads return the same object."""

    @pytest.mark.parametrize(
        "action",
        [
            A.remove_section("sec_missing"),
            A.move_section("sec_missing", 0),
            A.duplicate_section("sec_missing"),
            A.remove_block("sec_missing", "col_missing", "blk_missing"),
            A.duplicate_block("sec_missing", "col_missing", "blk_missing"),
            A.update_block("blk_missing", {"text": "x"}),
            A.update_section("sec_missing", {"padding": "0"}),
            A.set_active_tab("code"),
            Action("EXPLODE", {}),
            Action(A.ADD_SECTION, None),
            Action(A.MOVE_BLOCK, {"block_id": "x"}),
            Action(A.ADD_BLOCK, "garbage"),
            Action(A.UPDATE_GLOBAL_STYLES, "red"),
        ],
    )
    def test_same_state(self, state, action):
        assert reduce(state, action) is state

    def test_missing_block_in_existing_column(self, state):
        sid, left, _, _, _ = ids(state)
        assert reduce(state, A.remove_block(sid, left, "blk_missing")) is state

    def test_add_block_to_missing_column(self, state):
        sid, _, _, _, _ = ids(state)
        assert reduce(state, A.add_block(sid, "col_missing", create_block("text"))) is state
