"""
Mailforge Kernel - Structural Index

blockId -> (sectionId, columnId) for O(1) block lookup.
Rebuilt from scratch whenever the tree changes shape; never patched.
"""

from __future__ import annotations

from collections.abc import Iterable

from mailforge.kernel.types import BlockLocation, Section

BlockIndex = dict[str, BlockLocation]


def build_block_index(sections: Iterable[Section]) -> BlockIndex:
    """One entry per block reachable by full traversal. Pure, never raises."""
    index: BlockIndex = {}
    for section in sections:
        for column in section.columns:
            for block in column.blocks:
                index[block.id] = BlockLocation(section_id=section.id, column_id=column.id)
    return index
