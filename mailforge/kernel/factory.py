"""
Mailforge Kernel - Factories

The only code paths that allocate sections, columns and blocks for the editor.
Every node gets a fresh id; every block gets a private copy of its defaults.
"""

from __future__ import annotations

import copy

from mailforge.kernel.defaults import DEFAULT_SECTION_PROPERTIES
from mailforge.kernel.ids import generate_block_id, generate_column_id, generate_section_id
from mailforge.kernel.registry import BlockRegistry, get_default_registry
from mailforge.kernel.types import Block, Column, Section


def create_block(block_type: str, registry: BlockRegistry | None = None) -> Block:
    """Create a new block with the type's default properties."""
    reg = registry or get_default_registry()
    return Block(id=generate_block_id(), type=block_type, properties=reg.defaults_for(block_type))


def create_section(widths: list[str] | None = None) -> Section:
    """Create a section with one empty column per width (default: a single 100% column)."""
    widths = widths or ["100%"]
    return Section(
        id=generate_section_id(),
        columns=[Column(id=generate_column_id(), width=w, blocks=[]) for w in widths],
        properties=dict(DEFAULT_SECTION_PROPERTIES),
    )


def create_section_with_block(block_type: str, registry: BlockRegistry | None = None) -> Section:
    section = create_section()
    section.columns[0].blocks.append(create_block(block_type, registry))
    return section


def clone_block(block: Block) -> Block:
    """Deep copy with a fresh id."""
    return Block(id=generate_block_id(), type=block.type, properties=copy.deepcopy(block.properties))


def clone_section(section: Section) -> Section:
    """Deep copy with fresh ids for the section, its columns and every block."""
    return Section(
        id=generate_section_id(),
        properties=copy.deepcopy(section.properties),
        columns=[
            Column(
                id=generate_column_id(),
                width=col.width,
                blocks=[clone_block(b) for b in col.blocks],
            )
            for col in section.columns
        ],
    )
