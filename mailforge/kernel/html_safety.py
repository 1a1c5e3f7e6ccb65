"""
Mailforge Kernel - HTML safety helpers

Escaping, URL scheme checks, and the display-time sanitizer for raw-HTML
blocks. The generator routes every attribute and text value through here.

  escape_attr     & " ' < >   (attribute values)
  escape_content  & < >       (text nodes)
"""

from __future__ import annotations

import re
from html import escape as _html_escape

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------


def escape_attr(value: object) -> str:
    return _html_escape(str(value), quote=True)


def escape_content(value: object) -> str:
    return _html_escape(str(value), quote=False)


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

_SAFE_URL_RE = re.compile(r"^(https?://|mailto:|tel:|#|/|\?)", re.IGNORECASE)
_SVG_DATA_RE = re.compile(r"^data:image/svg", re.IGNORECASE)
_RASTER_DATA_RE = re.compile(r"^data:image/", re.IGNORECASE)


def is_safe_url(url: str) -> bool:
    """http(s), mailto, tel, fragments and relative paths. Rejects javascript:, data:, vbscript: etc."""
    trimmed = url.strip()
    if not trimmed:
        return False
    return bool(_SAFE_URL_RE.match(trimmed))


def is_safe_image_src(url: str) -> bool:
    """is_safe_url plus raster data:image/ URLs. SVG data URLs can carry script."""
    if is_safe_url(url):
        return True
    trimmed = url.strip()
    if _SVG_DATA_RE.match(trimmed):
        return False
    return bool(_RASTER_DATA_RE.match(trimmed))


def safe_url(url: str) -> str:
    return url if is_safe_url(url) else "#"


def safe_image_src(url: str) -> str:
    return url if is_safe_image_src(url) else "#"


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

_DANGEROUS_CSS_RE = re.compile(
    r"expression\s*\(|javascript\s*:|url\s*\(\s*['\"]?\s*(?:javascript|data|vbscript)\s*:",
    re.IGNORECASE,
)
_CSS_URL_RE = re.compile(r"url\s*\(", re.IGNORECASE)

ALLOWED_CSS_PROPERTIES: frozenset[str] = frozenset(
    {
        "color", "background-color", "background", "font-family", "font-size",
        "font-weight", "font-style", "text-decoration", "text-align", "text-transform",
        "line-height", "letter-spacing", "word-spacing",
        "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
        "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
        "border", "border-top", "border-right", "border-bottom", "border-left",
        "border-color", "border-width", "border-style", "border-radius",
        "width", "max-width", "min-width", "height", "max-height", "min-height",
        "display", "vertical-align", "white-space", "overflow",
        "opacity", "visibility",
        "border-collapse", "border-spacing", "table-layout",
    }
)  # fmt: skip


def sanitize_style(style: str) -> str:
    """Keep known-safe declarations only. Returns "" when nothing survives."""
    safe: list[str] = []
    for decl in style.split(";"):
        decl = decl.strip()
        if not decl or ":" not in decl:
            continue
        prop, _, value = decl.partition(":")
        prop = prop.strip().lower()
        value = value.strip()
        if prop not in ALLOWED_CSS_PROPERTIES:
            continue
        if _DANGEROUS_CSS_RE.search(value) or _CSS_URL_RE.search(value):
            continue
        safe.append(f"{prop}: {value}")
    return "; ".join(safe)


# ---------------------------------------------------------------------------
# Raw HTML sanitizer
# ---------------------------------------------------------------------------

ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "p", "br", "b", "strong", "i", "em", "u", "a", "span",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "blockquote",
        "table", "thead", "tbody", "tr", "td", "th",
        "img", "hr", "div", "sup", "sub",
    }
)  # fmt: skip

ALLOWED_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "href", "src", "alt", "title", "style", "class",
        "width", "height", "target", "rel",
        "align", "valign", "bgcolor", "border",
        "cellpadding", "cellspacing", "colspan", "rowspan",
    }
)  # fmt: skip

# Dropped together with everything inside them
REMOVE_WITH_CONTENT: frozenset[str] = frozenset(
    {"script", "style", "iframe", "object", "embed", "noscript", "template", "head", "title", "meta", "link"}
)


def sanitize_html(html: str) -> str:
    """
    Reduce end-user raw HTML to an email-safe subset.

    Disallowed elements are replaced by their text; executable containers are
    removed outright; attributes outside the allow-list are dropped; unsafe
    href values become "#", unsafe src attributes are removed.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    _sanitize_node(soup)
    return str(soup)


def _sanitize_node(node: Tag) -> None:
    for child in list(node.children):
        if isinstance(child, Comment):
            child.extract()
            continue
        if not isinstance(child, Tag):
            continue

        name = child.name.lower()
        if name in REMOVE_WITH_CONTENT:
            child.decompose()
            continue
        if name not in ALLOWED_TAGS:
            child.replace_with(NavigableString(child.get_text()))
            continue

        for attr in list(child.attrs):
            if attr.lower() not in ALLOWED_ATTRIBUTES:
                del child.attrs[attr]

        if "style" in child.attrs:
            cleaned = sanitize_style(child.attrs["style"])
            if cleaned:
                child.attrs["style"] = cleaned
            else:
                del child.attrs["style"]

        if "href" in child.attrs and not is_safe_url(child.attrs["href"]):
            child.attrs["href"] = "#"

        if "src" in child.attrs and not is_safe_image_src(child.attrs["src"]):
            del child.attrs["src"]

        _sanitize_node(child)
