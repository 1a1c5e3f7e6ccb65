"""
Mailforge kernel test configuration.

Shared fixtures: template builders and a fixed clock for the generator.
Postgres tests that need DATABASE_URL are skipped automatically when not set.
"""

from datetime import UTC, datetime

import pytest

from mailforge.kernel.factory import create_block, create_section
from mailforge.kernel.types import Template

ALL_BLOCK_TYPES = (
    "text",
    "button",
    "image",
    "divider",
    "spacer",
    "social",
    "html",
    "video",
    "heading",
    "countdown",
    "menu",
    "hero",
)


@pytest.fixture
def fixed_now():
    """A fixed generation time so countdown digits are stable."""
    return datetime(2030, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def two_column_template():
    """One section, two columns: [text, button] and [image]."""
    section = create_section(["50%", "50%"])
    left, right = section.columns
    left.blocks.extend([create_block("text"), create_block("button")])
    right.blocks.append(create_block("image"))
    return Template(sections=[section])


@pytest.fixture
def every_block_template():
    """One section per built-in block type, each block alone in a 100% column, plus a mixed section."""
    sections = []
    for block_type in ALL_BLOCK_TYPES:
        section = create_section()
        section.columns[0].blocks.append(create_block(block_type))
        sections.append(section)
    mixed = create_section(["50%", "50%"])
    mixed.columns[0].blocks.extend([create_block("hero"), create_block("text")])
    mixed.columns[1].blocks.extend([create_block("heading"), create_block("countdown")])
    sections.append(mixed)
    return Template(sections=sections)
