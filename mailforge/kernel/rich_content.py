"""
Mailforge Kernel - Rich content

Rewrites applied to the HTML held in text-bearing blocks:

  parse side     legacy <font color size face> -> <span style="...">
  generate side  variable chips -> {{ key }}, margin:0 forced on block elements

plus the {{ key }} merge-field helpers used by previews.
"""

from __future__ import annotations

import re

from lxml import etree

from mailforge.kernel.types import Variable

# ---------------------------------------------------------------------------
# Legacy <font> tags
# ---------------------------------------------------------------------------

FONT_SIZE_MAP: dict[str, str] = {
    "1": "10px",
    "2": "13px",
    "3": "16px",
    "4": "18px",
    "5": "24px",
    "6": "32px",
    "7": "48px",
    "small": "13px",
    "medium": "16px",
    "large": "18px",
}


def rewrite_font_tags(el: etree._Element) -> None:
    """Turn every <font> below el into a <span> with the equivalent inline style, in place."""
    for font in list(el.iter("font")):
        declarations: list[str] = []
        color = font.get("color")
        if color:
            declarations.append(f"color: {color}")
        size = (font.get("size") or "").strip().lower()
        if size in FONT_SIZE_MAP:
            declarations.append(f"font-size: {FONT_SIZE_MAP[size]}")
        face = font.get("face")
        if face:
            declarations.append(f"font-family: {face}")
        existing = (font.get("style") or "").strip().rstrip(";")
        if existing:
            declarations.append(existing)

        font.attrib.clear()
        font.tag = "span"
        if declarations:
            font.set("style", "; ".join(declarations))


# ---------------------------------------------------------------------------
# Generate-side rewrites
# ---------------------------------------------------------------------------

_CHIP_RE = re.compile(r'<span[^>]*class="ee-variable-chip"[^>]*>([^<]*)</span>')
_BLOCK_TAG_RE = re.compile(r"<(p|h[1-6]|ul|ol|li|blockquote)\b([^>]*)>", re.IGNORECASE)
_STYLE_ATTR_RE = re.compile(r'style\s*=\s*"([^"]*)"', re.IGNORECASE)
_MARGIN_DECL_RE = re.compile(r"(?:^|;)\s*margin(?:-[a-z]+)?\s*:", re.IGNORECASE)


def strip_variable_chips(html: str) -> str:
    """`<span class="ee-variable-chip" ...>{{ name }}</span>` -> `{{ name }}`."""
    return _CHIP_RE.sub(lambda m: m.group(1).strip(), html)


def force_block_margins(html: str) -> str:
    """Add margin:0 to paragraph/heading/list/blockquote tags that declare no margin."""

    def _fix(match: re.Match[str]) -> str:
        tag, attrs = match.group(1), match.group(2)
        if attrs.rstrip().endswith("/"):
            return match.group(0)
        style_match = _STYLE_ATTR_RE.search(attrs)
        if style_match is None:
            return f'<{tag}{attrs.rstrip()} style="margin:0">'
        style = style_match.group(1)
        if _MARGIN_DECL_RE.search(style):
            return match.group(0)
        style = style.strip().rstrip(";")
        new_style = f"{style}; margin:0" if style else "margin:0"
        new_attrs = attrs.replace(style_match.group(0), f'style="{new_style}"', 1)
        return f"<{tag}{new_attrs}>"

    return _BLOCK_TAG_RE.sub(_fix, html)


def prepare_rich_content(html: str) -> str:
    return force_block_margins(strip_variable_chips(html))


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

VARIABLE_RE = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")


def extract_variable_keys(text: str) -> list[str]:
    """Keys of every {{ key }} placeholder, first-seen order, no duplicates."""
    keys: list[str] = []
    for match in VARIABLE_RE.finditer(text):
        key = match.group(1).strip()
        if key not in keys:
            keys.append(key)
    return keys


def replace_variables(text: str, variables: list[Variable], use_sample: bool = True) -> str:
    """
    Substitute sample values for known placeholders.
    Unknown keys, and every key when use_sample is False, are normalized to `{{ key }}`.
    """
    by_key = {v.key: v for v in variables}

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1).strip()
        variable = by_key.get(key)
        if variable is None or not use_sample or variable.sample is None:
            return f"{{{{ {key} }}}}"
        return variable.sample

    return VARIABLE_RE.sub(_sub, text)


def group_variables(variables: list[Variable]) -> dict[str, list[Variable]]:
    """Group by Variable.group, ungrouped under "General". Insertion order is kept."""
    groups: dict[str, list[Variable]] = {}
    for variable in variables:
        group = variable.group if variable.group is not None else "General"
        groups.setdefault(group, []).append(variable)
    return groups
