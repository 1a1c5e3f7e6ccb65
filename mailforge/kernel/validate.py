"""
Mailforge Kernel - Validation and sanitizing

Two entry points for untrusted template data (storage, import, API input):

  validate_template(raw)  -> ValidationResult   diagnostics, every defect with its path
  sanitize_template(raw)  -> Template           coercion, always a usable template

Neither raises and neither mutates its input. Block types are checked
against the built-ins plus whatever the registry knows.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from mailforge.kernel.defaults import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_GLOBAL_STYLES,
    DEFAULT_SECTION_PROPERTIES,
)
from mailforge.kernel.registry import BlockRegistry, get_default_registry
from mailforge.kernel.types import (
    Block,
    Column,
    GlobalStyles,
    HeadMetadata,
    Section,
    Template,
    ValidationResult,
)

logger = logging.getLogger(__name__)

_PIXEL_WIDTH_RE = re.compile(r"^\s*(\d+)(?:\.\d+)?\s*(?:px)?\s*$")

_OPTIONAL_SECTION_PROPERTIES = ("backgroundImage", "backgroundSize", "backgroundRepeat")


def _as_raw(raw: Any) -> Any:
    return raw.to_dict() if isinstance(raw, Template) else raw


def _is_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_template(
    raw: Any,
    registry: BlockRegistry | None = None,
    *,
    check_properties: bool = False,
) -> ValidationResult:
    """
    Structural check of a template-shaped value.

    Collects every defect rather than stopping at the first, each prefixed
    with its position (sections[i].columns[j].blocks[k]). With
    check_properties, each block's properties also go through the handler's
    shape validator.
    """
    reg = registry or get_default_registry()
    data = _as_raw(raw)

    if not isinstance(data, dict):
        return ValidationResult(valid=False, errors=["Template must be a non-null object"])

    errors: list[str] = []
    sections = data.get("sections")
    if not isinstance(sections, list):
        errors.append('Template must have a "sections" array')
        sections = []

    for si, section in enumerate(sections):
        s_path = f"sections[{si}]"
        if not isinstance(section, dict):
            errors.append(f"{s_path}: must be an object")
            continue
        if not _is_id(section.get("id")):
            errors.append(f'{s_path}: missing or invalid "id"')
        columns = section.get("columns")
        if not isinstance(columns, list):
            errors.append(f'{s_path}: must have a "columns" array')
            continue

        for ci, column in enumerate(columns):
            c_path = f"{s_path}.columns[{ci}]"
            if not isinstance(column, dict):
                errors.append(f"{c_path}: must be an object")
                continue
            if not _is_id(column.get("id")):
                errors.append(f'{c_path}: missing or invalid "id"')
            blocks = column.get("blocks")
            if not isinstance(blocks, list):
                errors.append(f'{c_path}: must have a "blocks" array')
                continue

            for bi, block in enumerate(blocks):
                errors.extend(_block_errors(block, f"{c_path}.blocks[{bi}]", reg, check_properties))

    global_styles = data.get("globalStyles")
    if global_styles is not None and not isinstance(global_styles, dict):
        errors.append("globalStyles must be an object")

    head_metadata = data.get("headMetadata")
    if head_metadata is not None and not isinstance(head_metadata, dict):
        errors.append("headMetadata must be an object")

    return ValidationResult(valid=not errors, errors=errors)


def _block_errors(block: Any, path: str, reg: BlockRegistry, check_properties: bool) -> list[str]:
    if not isinstance(block, dict):
        return [f"{path}: must be an object"]

    errors: list[str] = []
    if not _is_id(block.get("id")):
        errors.append(f'{path}: missing or invalid "id"')
    block_type = block.get("type")
    if not reg.is_known(block_type):
        errors.append(f'{path}: invalid block type "{block_type}"')
    properties = block.get("properties")
    if not isinstance(properties, dict):
        errors.append(f'{path}: missing "properties" object')
        return errors

    if check_properties and reg.is_known(block_type):
        handler = reg.get(block_type)
        if handler is not None and handler.validate is not None:
            errors.extend(f"{path}.properties: {msg}" for msg in handler.validate(properties))
    return errors


# ---------------------------------------------------------------------------
# Sanitizing
# ---------------------------------------------------------------------------


def sanitize_template(raw: Any, registry: BlockRegistry | None = None) -> Template:
    """
    Coerce anything into a well-formed Template.

    Sections without a usable id or columns array are dropped, as are
    columns without a usable id. A column with no blocks array keeps an
    empty one.
    Blocks with a bad id, an unknown type or non-object properties are
    dropped; surviving blocks get their properties merged over the type's
    defaults. Missing style and metadata fields are defaulted.
    """
    reg = registry or get_default_registry()
    data = _as_raw(raw)
    if not isinstance(data, dict):
        return Template()

    sections: list[Section] = []
    raw_sections = data.get("sections")
    for raw_section in raw_sections if isinstance(raw_sections, list) else []:
        section = _sanitize_section(raw_section, reg)
        if section is not None:
            sections.append(section)

    return Template(
        sections=sections,
        global_styles=_sanitize_global_styles(data.get("globalStyles")),
        head_metadata=_sanitize_head_metadata(data.get("headMetadata")),
    )


def _sanitize_section(raw: Any, reg: BlockRegistry) -> Section | None:
    if not isinstance(raw, dict) or not _is_id(raw.get("id")):
        return None
    raw_columns = raw.get("columns")
    if not isinstance(raw_columns, list):
        return None

    columns: list[Column] = []
    for raw_column in raw_columns:
        if not isinstance(raw_column, dict) or not _is_id(raw_column.get("id")):
            continue
        raw_blocks = raw_column.get("blocks")
        if not isinstance(raw_blocks, list):
            raw_blocks = []
        blocks = [b for b in (_sanitize_block(rb, reg) for rb in raw_blocks) if b is not None]
        width = raw_column.get("width")
        columns.append(
            Column(
                id=raw_column["id"],
                width=width if isinstance(width, str) else DEFAULT_COLUMN_WIDTH,
                blocks=blocks,
            )
        )

    raw_props = raw.get("properties") if isinstance(raw.get("properties"), dict) else {}
    properties: dict[str, Any] = {}
    for key, default in DEFAULT_SECTION_PROPERTIES.items():
        value = raw_props.get(key)
        properties[key] = value if isinstance(value, type(default)) else default
    for key in _OPTIONAL_SECTION_PROPERTIES:
        if isinstance(raw_props.get(key), str):
            properties[key] = raw_props[key]

    return Section(id=raw["id"], columns=columns, properties=properties)


def _sanitize_block(raw: Any, reg: BlockRegistry) -> Block | None:
    if not isinstance(raw, dict) or not _is_id(raw.get("id")):
        return None
    block_type = raw.get("type")
    if not reg.is_known(block_type):
        logger.warning("Dropping block %s of unknown type %r", raw.get("id"), block_type)
        return None
    properties = raw.get("properties")
    if not isinstance(properties, dict):
        return None

    merged = reg.defaults_for(block_type)
    merged.update(copy.deepcopy(properties))
    return Block(id=raw["id"], type=block_type, properties=merged)


def _coerce_width(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_GLOBAL_STYLES["width"]
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _PIXEL_WIDTH_RE.match(value)
        if match:
            return int(match.group(1))
    return DEFAULT_GLOBAL_STYLES["width"]


def _sanitize_global_styles(raw: Any) -> GlobalStyles:
    gs = raw if isinstance(raw, dict) else {}
    background = gs.get("backgroundColor")
    font_family = gs.get("fontFamily")
    return GlobalStyles(
        background_color=background if isinstance(background, str) else DEFAULT_GLOBAL_STYLES["backgroundColor"],
        width=_coerce_width(gs.get("width")),
        font_family=font_family if isinstance(font_family, str) else DEFAULT_GLOBAL_STYLES["fontFamily"],
    )


def _sanitize_head_metadata(raw: Any) -> HeadMetadata:
    hm = raw if isinstance(raw, dict) else {}
    title = hm.get("title")
    preview = hm.get("previewText")
    styles = hm.get("headStyles")
    return HeadMetadata(
        title=title if isinstance(title, str) else "",
        preview_text=preview if isinstance(preview, str) else "",
        head_styles=[s for s in styles if isinstance(s, str)] if isinstance(styles, list) else [],
    )
