"""
Mailforge Kernel - Markup helpers

Small functions shared by the parser, the generator and the block
handlers: attribute reading on lxml elements, padding resolution,
text/inner-markup extraction, and attribute string building.
"""

from __future__ import annotations

from typing import Any

from lxml import etree

from mailforge.kernel.html_safety import escape_attr, escape_content

INDENT = "  "

RESET_CSS = "p, h1, h2, h3, h4, h5, h6, ul, ol, li, blockquote { margin: 0; }"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def is_element(node: Any) -> bool:
    """lxml yields comments and processing instructions as children too."""
    return isinstance(node.tag, str)


def child_elements(el: etree._Element, tag: str | None = None) -> list[etree._Element]:
    return [c for c in el if is_element(c) and (tag is None or c.tag == tag)]


def css_classes(el: etree._Element) -> list[str]:
    return (el.get("css-class") or "").split()


def attr(el: etree._Element, name: str, fallback: str) -> str:
    value = el.get(name)
    return value if value is not None else fallback


def resolve_padding(el: etree._Element, fallback: str) -> str:
    """The `padding` shorthand, else the individual sides with missing ones as 0."""
    shorthand = el.get("padding")
    if shorthand:
        return shorthand
    sides = [el.get(f"padding-{side}") for side in ("top", "right", "bottom", "left")]
    if any(sides):
        return " ".join(s or "0" for s in sides)
    return fallback


def text_content(el: etree._Element) -> str:
    """Concatenated text of the subtree, comments excluded."""
    parts = [el.text or ""]
    for child in el:
        if is_element(child):
            parts.append(text_content(child))
        parts.append(child.tail or "")
    return "".join(parts)


def inner_markup(el: etree._Element) -> str:
    """Serialized children of el, the equivalent of innerHTML."""
    parts = [escape_content(el.text or "")]
    for child in el:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


def comments(el: etree._Element) -> list[str]:
    return [c.text or "" for c in el if isinstance(c, etree._Comment)]


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def build_attrs(pairs: list[tuple[str, Any]]) -> str:
    """` name="value"` for every pair whose value is neither None nor empty."""
    out: list[str] = []
    for name, value in pairs:
        if value is None or value == "":
            continue
        out.append(f' {name}="{escape_attr(value)}"')
    return "".join(out)


def non_neutral(value: Any, neutral: str) -> Any:
    """Drop a text-style value that equals its CSS neutral (normal, none, auto)."""
    return None if not value or value == neutral else value


def format_percent(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}%"
