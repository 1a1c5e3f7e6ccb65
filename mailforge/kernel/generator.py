"""
Mailforge Kernel - MJML Generator

generate_mjml(template) -> str

Pure and total: values are escaped or neutralized, never rejected. The
output is what parse_mjml() reads back.

Document order:
  <mjml>
    <mj-head>   title, preview, mj-font per hosted web font in use,
                mj-attributes/mj-all font-family, reset mj-style, user mj-styles
    <mj-body background-color width="Npx">
      one mj-section (or mj-hero) per Section
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any

from mailforge.kernel.html_safety import escape_attr, escape_content, safe_image_src, safe_url
from mailforge.kernel.markup import INDENT, RESET_CSS, build_attrs
from mailforge.kernel.registry import BlockRegistry, get_default_registry
from mailforge.kernel.types import Block, Column, Section, Template

logger = logging.getLogger(__name__)

# First family of a font stack (lowercased) -> (display name, stylesheet URL)
WEB_FONTS: dict[str, tuple[str, str]] = {
    name.lower(): (name, f"https://fonts.googleapis.com/css?family={name.replace(' ', '+')}:400,700")
    for name in (
        "Roboto",
        "Open Sans",
        "Lato",
        "Montserrat",
        "Raleway",
        "Poppins",
        "Oswald",
        "Merriweather",
        "Playfair Display",
        "Nunito",
        "Source Sans Pro",
        "Ubuntu",
    )
}

_HEAD_CLOSE_RE = re.compile(r"</mj-head", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_mjml(
    template: Template,
    registry: BlockRegistry | None = None,
    *,
    now: datetime | None = None,
) -> str:
    reg = registry or get_default_registry()
    now = now or datetime.now(UTC)
    gs = template.global_styles
    head = template.head_metadata
    i1, i2, i3 = INDENT, INDENT * 2, INDENT * 3

    lines = ["<mjml>", f"{i1}<mj-head>"]
    if head.title:
        lines.append(f"{i2}<mj-title>{escape_content(head.title)}</mj-title>")
    if head.preview_text:
        lines.append(f"{i2}<mj-preview>{escape_content(head.preview_text)}</mj-preview>")
    for name, href in used_web_fonts(template):
        lines.append(f'{i2}<mj-font name="{escape_attr(name)}" href="{escape_attr(href)}" />')
    lines.append(f"{i2}<mj-attributes>")
    lines.append(f'{i3}<mj-all font-family="{escape_attr(gs.font_family)}" />')
    lines.append(f"{i2}</mj-attributes>")
    lines.append(f"{i2}<mj-style>")
    lines.append(f"{i3}{RESET_CSS}")
    lines.append(f"{i2}</mj-style>")
    for style in head.head_styles:
        lines.append(f"{i2}<mj-style>{_HEAD_CLOSE_RE.sub('', str(style))}</mj-style>")
    lines.append(f"{i1}</mj-head>")

    lines.append(f'{i1}<mj-body background-color="{escape_attr(gs.background_color)}" width="{_width_px(gs.width)}px">')
    for section in template.sections:
        lines.append(generate_section(section, i2, reg, now))
    lines.append(f"{i1}</mj-body>")
    lines.append("</mjml>")
    return "\n".join(lines)


def _width_px(width: Any) -> int:
    try:
        return int(width)
    except (TypeError, ValueError):
        return 600


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------


def _first_family(stack: Any) -> str:
    if not isinstance(stack, str) or not stack.strip():
        return ""
    return stack.split(",")[0].strip().strip("'\"").lower()


def used_web_fonts(template: Template) -> list[tuple[str, str]]:
    """Hosted fonts referenced by the global, section or block font stacks, in first-use order."""
    stacks: list[Any] = [template.global_styles.font_family]
    for section in template.sections:
        stacks.append(section.properties.get("fontFamily"))
        for column in section.columns:
            for block in column.blocks:
                stacks.append(block.properties.get("fontFamily"))

    fonts: list[tuple[str, str]] = []
    for stack in stacks:
        font = WEB_FONTS.get(_first_family(stack))
        if font is not None and font not in fonts:
            fonts.append(font)
    return fonts


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _lone_hero(section: Section) -> Block | None:
    if len(section.columns) != 1 or len(section.columns[0].blocks) != 1:
        return None
    block = section.columns[0].blocks[0]
    return block if block.type == "hero" else None


def generate_section(section: Section, indent: str, reg: BlockRegistry, now: datetime) -> str:
    hero = _lone_hero(section)
    if hero is not None:
        return generate_native_hero(hero, indent)

    p = section.properties
    attrs = build_attrs(
        [
            ("background-color", p.get("backgroundColor")),
            ("padding", p.get("padding")),
            ("border-radius", p.get("borderRadius")),
            ("full-width", "full-width" if p.get("fullWidth") else None),
            ("background-url", safe_image_src(str(p["backgroundImage"])) if p.get("backgroundImage") else None),
            ("background-size", p.get("backgroundSize")),
            ("background-repeat", p.get("backgroundRepeat")),
        ]
    )
    lines = [f"{indent}<mj-section{attrs}>"]
    for column in section.columns:
        lines.append(_generate_column(column, indent + INDENT, reg, now))
    lines.append(f"{indent}</mj-section>")
    return "\n".join(lines)


def _generate_column(column: Column, indent: str, reg: BlockRegistry, now: datetime) -> str:
    lines = [f"{indent}<mj-column{build_attrs([('width', column.width)])}>"]
    for block in column.blocks:
        markup = generate_block(block, indent + INDENT, reg, now)
        if markup:
            lines.append(markup)
    lines.append(f"{indent}</mj-column>")
    return "\n".join(lines)


def generate_block(block: Block, indent: str, reg: BlockRegistry, now: datetime) -> str:
    handler = reg.get(block.type)
    if handler is None or handler.generate is None:
        logger.debug("No generator for block type %r, omitting block %s", block.type, block.id)
        return ""
    return handler.generate(block, indent, now)


def generate_native_hero(block: Block, indent: str) -> str:
    """A hero block alone in its section, as MJML's own mj-hero."""
    p = block.properties
    inner = indent + INDENT
    attrs = build_attrs(
        [
            ("mode", "fluid-height"),
            ("background-color", p.get("backgroundColor")),
            ("background-url", safe_image_src(str(p["backgroundImage"])) if p.get("backgroundImage") else None),
            ("padding", p.get("padding")),
        ]
    )
    align = p.get("align")

    lines = [f"{indent}<mj-hero{attrs}>"]
    if p.get("heading"):
        text_attrs = build_attrs(
            [("align", align), ("color", p.get("headingColor")), ("font-size", p.get("headingFontSize"))]
        )
        lines.append(f'{inner}<mj-text{text_attrs}><h2 style="margin:0">{escape_content(p["heading"])}</h2></mj-text>')
    if p.get("subtext"):
        text_attrs = build_attrs(
            [("align", align), ("color", p.get("subtextColor")), ("font-size", p.get("subtextFontSize"))]
        )
        lines.append(f"{inner}<mj-text{text_attrs}>{escape_content(p['subtext'])}</mj-text>")
    if p.get("buttonText"):
        button_attrs = build_attrs(
            [
                ("href", safe_url(str(p.get("buttonHref") or "#"))),
                ("background-color", p.get("buttonBackgroundColor")),
                ("color", p.get("buttonColor")),
                ("border-radius", p.get("buttonBorderRadius")),
                ("align", align),
            ]
        )
        lines.append(f"{inner}<mj-button{button_attrs}>{escape_content(p['buttonText'])}</mj-button>")
    lines.append(f"{indent}</mj-hero>")
    return "\n".join(lines)
