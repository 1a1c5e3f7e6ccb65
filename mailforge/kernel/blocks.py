"""
Mailforge Kernel - Built-in block handlers

One parse/generate/validate/defaults set per built-in block type, collected
in BUILT_IN_HANDLERS for the registry.

Parsing reads the element's own attributes and falls back to MJML's
built-in default for the tag (see defaults.MJML_DEFAULTS), then to the
editor default for properties the dialect has no opinion on.

Editor-only types travel through MJML as mj-text / mj-image carrying an
`ee-block-<type>` css-class marker:

  heading    mj-text  ee-block-heading ee-heading-hN   <hN>content</hN>
  html       mj-text  ee-block-html                    sanitized markup
  countdown  mj-text  ee-block-countdown               <!--ee-countdown:{json}--> + frozen digits
  hero       mj-text  ee-block-hero                    <!--ee-hero:{json}--> + static markup
  video      mj-image ee-block-video                   thumbnail linking to the video

Hero blocks alone in a section are emitted as a native mj-hero by the
generator instead; see generator.py and parser.py.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from functools import partial
from typing import Any

from lxml import etree

from mailforge.kernel.defaults import DEFAULT_BLOCK_PROPERTIES, block_defaults, mjml_default
from mailforge.kernel.html_safety import escape_attr, escape_content, safe_image_src, safe_url, sanitize_html
from mailforge.kernel.ids import generate_block_id
from mailforge.kernel.markup import (
    INDENT,
    attr,
    build_attrs,
    child_elements,
    comments,
    css_classes,
    inner_markup,
    non_neutral,
    resolve_padding,
    text_content,
)
from mailforge.kernel.registry import MARKER_PREFIX, BlockTypeHandler
from mailforge.kernel.rich_content import prepare_rich_content, rewrite_font_tags
from mailforge.kernel.types import Block

logger = logging.getLogger(__name__)

HEADING_LEVELS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")
AUTO_HEADING_LEVELS: tuple[str, ...] = ("h1", "h2", "h3", "h4")

COUNTDOWN_COMMENT_PREFIX = "ee-countdown:"
HERO_COMMENT_PREFIX = "ee-hero:"

_YOUTUBE_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})")

# Platform names MJML ships icons for. A custom `src` is ignored by MJML
# when the name is one of these, so custom icons are emitted as custom-<name>.
_SOCIAL_BASE_PLATFORMS = (
    "facebook", "twitter", "x", "google", "pinterest", "linkedin", "tumblr",
    "xing", "github", "instagram", "web", "snapchat", "youtube", "vimeo",
    "medium", "soundcloud", "dribbble",
)  # fmt: skip
MJML_SOCIAL_PLATFORMS: frozenset[str] = frozenset(
    list(_SOCIAL_BASE_PLATFORMS) + [f"{name}-noshare" for name in _SOCIAL_BASE_PLATFORMS]
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _new_block(block_type: str, properties: dict[str, Any]) -> Block:
    props = block_defaults(block_type)
    props.update(properties)
    return Block(id=generate_block_id(), type=block_type, properties=props)


def _dialect(el: etree._Element, name: str, block_type: str, prop: str) -> str:
    """The attribute, else MJML's default for this tag, else the editor default."""
    value = el.get(name)
    if value is not None:
        return value
    fallback = mjml_default(el.tag, name)
    if fallback:
        return fallback
    return DEFAULT_BLOCK_PROPERTIES[block_type][prop]


def _padding(el: etree._Element, block_type: str) -> str:
    fallback = mjml_default(el.tag, "padding") or DEFAULT_BLOCK_PROPERTIES[block_type]["padding"]
    return resolve_padding(el, fallback)


def _text_style(el: etree._Element, block_type: str) -> dict[str, Any]:
    return {
        "fontFamily": _dialect(el, "font-family", block_type, "fontFamily"),
        "fontSize": _dialect(el, "font-size", block_type, "fontSize"),
        "color": _dialect(el, "color", block_type, "color"),
        "lineHeight": _dialect(el, "line-height", block_type, "lineHeight"),
        "padding": _padding(el, block_type),
        "align": _dialect(el, "align", block_type, "align"),
        "fontWeight": _dialect(el, "font-weight", block_type, "fontWeight"),
        "textTransform": _dialect(el, "text-transform", block_type, "textTransform"),
        "letterSpacing": _dialect(el, "letter-spacing", block_type, "letterSpacing"),
    }


def _text_attr_pairs(p: dict[str, Any]) -> list[tuple[str, Any]]:
    return [
        ("font-family", p.get("fontFamily")),
        ("font-size", p.get("fontSize")),
        ("color", p.get("color")),
        ("line-height", p.get("lineHeight")),
        ("padding", p.get("padding")),
        ("align", p.get("align")),
        ("font-weight", non_neutral(p.get("fontWeight"), "normal")),
        ("text-transform", non_neutral(p.get("textTransform"), "none")),
        ("letter-spacing", non_neutral(p.get("letterSpacing"), "normal")),
    ]


def _href(value: Any) -> str | None:
    return safe_url(str(value)) if value else None


def _src(value: Any) -> str | None:
    return safe_image_src(str(value)) if value else None


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _embedded_params(el: etree._Element, prefix: str) -> dict[str, Any]:
    """JSON parameters stored in a leading <!--prefix{...}--> comment, {} if absent or broken."""
    for text in comments(el):
        text = text.strip()
        if not text.startswith(prefix):
            continue
        try:
            params = json.loads(text[len(prefix):])
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed %s comment", prefix.rstrip(":"))
            return {}
        return params if isinstance(params, dict) else {}
    return {}


def _embed_params(prefix: str, props: dict[str, Any]) -> str:
    # "--" may not appear inside an XML comment
    payload = (
        json.dumps(props, sort_keys=True, default=str)
        .replace("--", "-\\u002d")
        .replace("&", "\\u0026")
        .replace("<", "\\u003c")
    )
    return f"<!--{prefix}{payload}-->"


def _shape_errors(block_type: str, props: dict[str, Any]) -> list[str]:
    """Present properties must have the same JSON type as the editor default."""
    errors: list[str] = []
    for key, default in DEFAULT_BLOCK_PROPERTIES.get(block_type, {}).items():
        if key not in props:
            continue
        expected = type(default)
        if not isinstance(props[key], expected):
            errors.append(f'"{key}" must be of type {expected.__name__}')
    return errors


# ---------------------------------------------------------------------------
# text
# ---------------------------------------------------------------------------


def _lone_heading(el: etree._Element) -> etree._Element | None:
    elements = child_elements(el)
    if len(elements) != 1 or elements[0].tag not in AUTO_HEADING_LEVELS:
        return None
    if (el.text or "").strip():
        return None
    if any((child.tail or "").strip() for child in el):
        return None
    return elements[0]


def parse_text(el: etree._Element) -> Block:
    rewrite_font_tags(el)
    # Only unmarked mj-text from other tools is promoted to a heading
    if f"{MARKER_PREFIX}text" not in css_classes(el) and _lone_heading(el) is not None:
        return parse_heading(el)
    return _new_block("text", {"content": inner_markup(el).strip(), **_text_style(el, "text")})


def generate_text(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs([("css-class", f"{MARKER_PREFIX}text")] + _text_attr_pairs(p))
    content = prepare_rich_content(str(p.get("content") or ""))
    return f"{indent}<mj-text{attrs}>{content}</mj-text>"


# ---------------------------------------------------------------------------
# heading
# ---------------------------------------------------------------------------


def parse_heading(el: etree._Element) -> Block:
    rewrite_font_tags(el)
    inner = next((c for c in child_elements(el) if c.tag in HEADING_LEVELS), None)

    level = next((c[len("ee-heading-"):] for c in css_classes(el) if c.startswith("ee-heading-")), None)
    if level not in HEADING_LEVELS:
        level = inner.tag if inner is not None else "h2"

    props = _text_style(el, "heading")
    # The heading element itself sizes and bolds the text when mj-text does not
    if el.get("font-size") is None:
        props["fontSize"] = DEFAULT_BLOCK_PROPERTIES["heading"]["fontSize"]
    if el.get("font-weight") is None:
        props["fontWeight"] = DEFAULT_BLOCK_PROPERTIES["heading"]["fontWeight"]

    content = inner_markup(inner) if inner is not None else inner_markup(el)
    return _new_block("heading", {"content": content.strip(), "level": level, **props})


def generate_heading(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    level = p.get("level") if p.get("level") in HEADING_LEVELS else "h2"
    attrs = build_attrs([("css-class", f"ee-block-heading ee-heading-{level}")] + _text_attr_pairs(p))
    content = prepare_rich_content(f"<{level}>{p.get('content') or ''}</{level}>")
    return f"{indent}<mj-text{attrs}>{content}</mj-text>"


def validate_heading(props: dict[str, Any]) -> list[str]:
    errors = _shape_errors("heading", props)
    if "level" in props and props["level"] not in HEADING_LEVELS:
        errors.append('"level" must be one of h1-h6')
    return errors


# ---------------------------------------------------------------------------
# button
# ---------------------------------------------------------------------------


def parse_button(el: etree._Element) -> Block:
    return _new_block(
        "button",
        {
            "text": text_content(el).strip(),
            "href": _dialect(el, "href", "button", "href"),
            "backgroundColor": _dialect(el, "background-color", "button", "backgroundColor"),
            "color": _dialect(el, "color", "button", "color"),
            "fontFamily": _dialect(el, "font-family", "button", "fontFamily"),
            "fontSize": _dialect(el, "font-size", "button", "fontSize"),
            "borderRadius": _dialect(el, "border-radius", "button", "borderRadius"),
            "padding": _padding(el, "button"),
            "innerPadding": _dialect(el, "inner-padding", "button", "innerPadding"),
            "align": _dialect(el, "align", "button", "align"),
            "width": _dialect(el, "width", "button", "width"),
            "fontWeight": _dialect(el, "font-weight", "button", "fontWeight"),
            "textTransform": _dialect(el, "text-transform", "button", "textTransform"),
            "letterSpacing": _dialect(el, "letter-spacing", "button", "letterSpacing"),
        },
    )


def generate_button(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs(
        [
            ("href", _href(p.get("href"))),
            ("background-color", p.get("backgroundColor")),
            ("color", p.get("color")),
            ("font-family", p.get("fontFamily")),
            ("font-size", p.get("fontSize")),
            ("border-radius", p.get("borderRadius")),
            ("padding", p.get("padding")),
            ("inner-padding", p.get("innerPadding")),
            ("align", p.get("align")),
            ("width", non_neutral(p.get("width"), "auto")),
            ("font-weight", non_neutral(p.get("fontWeight"), "normal")),
            ("text-transform", non_neutral(p.get("textTransform"), "none")),
            ("letter-spacing", non_neutral(p.get("letterSpacing"), "normal")),
        ]
    )
    return f"{indent}<mj-button{attrs}>{escape_content(p.get('text') or '')}</mj-button>"


# ---------------------------------------------------------------------------
# image / video
# ---------------------------------------------------------------------------


def youtube_thumbnail(url: str) -> str:
    match = _YOUTUBE_RE.search(url or "")
    if match is None:
        return ""
    return f"https://img.youtube.com/vi/{match.group(1)}/hqdefault.jpg"


def parse_image(el: etree._Element) -> Block:
    href = el.get("href") or ""
    if _YOUTUBE_RE.search(href):
        return parse_video(el)
    return _new_block(
        "image",
        {
            "src": attr(el, "src", ""),
            "alt": attr(el, "alt", ""),
            "href": href,
            "width": el.get("width") or DEFAULT_BLOCK_PROPERTIES["image"]["width"],
            "height": _dialect(el, "height", "image", "height"),
            "padding": _padding(el, "image"),
            "align": _dialect(el, "align", "image", "align"),
            "fluidOnMobile": el.get("fluid-on-mobile") == "true",
        },
    )


def generate_image(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs(
        [
            ("src", _src(p.get("src"))),
            ("alt", p.get("alt")),
            ("href", _href(p.get("href"))),
            ("width", p.get("width")),
            ("height", non_neutral(p.get("height"), "auto")),
            ("padding", p.get("padding")),
            ("align", p.get("align")),
            ("fluid-on-mobile", "true" if p.get("fluidOnMobile") else None),
        ]
    )
    return f"{indent}<mj-image{attrs} />"


def parse_video(el: etree._Element) -> Block:
    src = el.get("href") or ""
    thumbnail = el.get("src") or ""
    if thumbnail and thumbnail == youtube_thumbnail(src):
        thumbnail = ""
    return _new_block(
        "video",
        {
            "src": src,
            "thumbnailUrl": thumbnail,
            "alt": attr(el, "alt", DEFAULT_BLOCK_PROPERTIES["video"]["alt"]),
            "padding": _padding(el, "video"),
            "align": _dialect(el, "align", "video", "align"),
        },
    )


def generate_video(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    thumbnail = p.get("thumbnailUrl") or youtube_thumbnail(str(p.get("src") or ""))
    attrs = build_attrs(
        [
            ("css-class", "ee-block-video"),
            ("src", _src(thumbnail)),
            ("href", _href(p.get("src"))),
            ("alt", p.get("alt")),
            ("padding", p.get("padding")),
            ("align", p.get("align")),
        ]
    )
    return f"{indent}<mj-image{attrs} />"


# ---------------------------------------------------------------------------
# divider / spacer
# ---------------------------------------------------------------------------


def parse_divider(el: etree._Element) -> Block:
    return _new_block(
        "divider",
        {
            "borderColor": _dialect(el, "border-color", "divider", "borderColor"),
            "borderWidth": _dialect(el, "border-width", "divider", "borderWidth"),
            "borderStyle": _dialect(el, "border-style", "divider", "borderStyle"),
            "padding": _padding(el, "divider"),
            "width": _dialect(el, "width", "divider", "width"),
        },
    )


def generate_divider(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs(
        [
            ("border-color", p.get("borderColor")),
            ("border-width", p.get("borderWidth")),
            ("border-style", p.get("borderStyle")),
            ("padding", p.get("padding")),
            ("width", p.get("width")),
        ]
    )
    return f"{indent}<mj-divider{attrs} />"


def parse_spacer(el: etree._Element) -> Block:
    return _new_block("spacer", {"height": _dialect(el, "height", "spacer", "height")})


def generate_spacer(block: Block, indent: str, now: datetime) -> str:
    attrs = build_attrs([("height", block.properties.get("height"))])
    return f"{indent}<mj-spacer{attrs} />"


# ---------------------------------------------------------------------------
# social
# ---------------------------------------------------------------------------


def _social_name(el: etree._Element) -> str:
    for cls in css_classes(el):
        if cls.startswith("ee-social-"):
            return cls[len("ee-social-"):]
    name = el.get("name") or "web"
    if name.startswith("custom-"):
        return name[len("custom-"):]
    return name


def parse_social(el: etree._Element) -> Block:
    elements: list[dict[str, Any]] = []
    for child in el.iter("mj-social-element"):
        element: dict[str, Any] = {"name": _social_name(child), "href": attr(child, "href", "#")}
        if child.get("src"):
            element["src"] = child.get("src")
        content = text_content(child).strip()
        if content:
            element["content"] = content
        if child.get("background-color"):
            element["backgroundColor"] = child.get("background-color")
        if child.get("color"):
            element["color"] = child.get("color")
        elements.append(element)

    props: dict[str, Any] = {
        "mode": _dialect(el, "mode", "social", "mode"),
        "align": _dialect(el, "align", "social", "align"),
        "iconSize": _dialect(el, "icon-size", "social", "iconSize"),
        "iconPadding": _dialect(el, "icon-padding", "social", "iconPadding"),
        "padding": _padding(el, "social"),
        "fontSize": _dialect(el, "font-size", "social", "fontSize"),
        "color": _dialect(el, "color", "social", "color"),
        "borderRadius": _dialect(el, "border-radius", "social", "borderRadius"),
    }
    if elements:
        props["elements"] = elements
    return _new_block("social", props)


def generate_social(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs(
        [
            ("mode", p.get("mode")),
            ("align", p.get("align")),
            ("icon-size", p.get("iconSize")),
            ("icon-padding", p.get("iconPadding")),
            ("padding", p.get("padding")),
            ("font-size", p.get("fontSize")),
            ("color", p.get("color")),
            ("border-radius", p.get("borderRadius")),
        ]
    )
    lines = [f"{indent}<mj-social{attrs}>"]
    for element in _list(p.get("elements")):
        if not isinstance(element, dict):
            continue
        name = str(element.get("name") or "web")
        css_class = None
        if element.get("src") and name in MJML_SOCIAL_PLATFORMS:
            css_class = f"ee-social-{name}"
            name = f"custom-{name}"
        el_attrs = build_attrs(
            [
                ("name", name),
                ("css-class", css_class),
                ("href", _href(element.get("href"))),
                ("src", _src(element.get("src"))),
                ("background-color", element.get("backgroundColor")),
                ("color", element.get("color")),
            ]
        )
        content = escape_content(element.get("content") or "")
        lines.append(f"{indent}{INDENT}<mj-social-element{el_attrs}>{content}</mj-social-element>")
    lines.append(f"{indent}</mj-social>")
    return "\n".join(lines)


def validate_social(props: dict[str, Any]) -> list[str]:
    errors = _shape_errors("social", props)
    for i, element in enumerate(_list(props.get("elements"))):
        if not isinstance(element, dict) or not isinstance(element.get("name"), str):
            errors.append(f'elements[{i}]: must be an object with a string "name"')
    return errors


# ---------------------------------------------------------------------------
# menu
# ---------------------------------------------------------------------------


def parse_menu(el: etree._Element) -> Block:
    links = list(el.iter("mj-navbar-link"))
    items = [{"text": text_content(link).strip() or "Link", "href": attr(link, "href", "#")} for link in links]

    props: dict[str, Any] = {
        "align": _dialect(el, "align", "menu", "align"),
        "padding": _padding(el, "menu"),
        "hamburger": el.get("hamburger") == "hamburger",
        "iconColor": _dialect(el, "ico-color", "menu", "iconColor"),
    }
    if links:
        first = links[0]
        props["fontFamily"] = _dialect(first, "font-family", "menu", "fontFamily")
        props["fontSize"] = _dialect(first, "font-size", "menu", "fontSize")
        props["color"] = _dialect(first, "color", "menu", "color")
        props["items"] = items
    return _new_block("menu", props)


def generate_menu(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs(
        [
            ("align", p.get("align")),
            ("hamburger", "hamburger" if p.get("hamburger") else None),
            ("ico-color", p.get("iconColor") if p.get("hamburger") else None),
            ("padding", p.get("padding")),
        ]
    )
    lines = [f"{indent}<mj-navbar{attrs}>"]
    for item in _list(p.get("items")):
        if not isinstance(item, dict):
            continue
        link_attrs = build_attrs(
            [
                ("href", _href(item.get("href"))),
                ("color", p.get("color")),
                ("font-family", p.get("fontFamily")),
                ("font-size", p.get("fontSize")),
            ]
        )
        text = escape_content(item.get("text") or "")
        lines.append(f"{indent}{INDENT}<mj-navbar-link{link_attrs}>{text}</mj-navbar-link>")
    lines.append(f"{indent}</mj-navbar>")
    return "\n".join(lines)


def validate_menu(props: dict[str, Any]) -> list[str]:
    errors = _shape_errors("menu", props)
    for i, item in enumerate(_list(props.get("items"))):
        if not isinstance(item, dict) or not isinstance(item.get("text"), str):
            errors.append(f'items[{i}]: must be an object with a string "text"')
    return errors


# ---------------------------------------------------------------------------
# html
# ---------------------------------------------------------------------------


def parse_html(el: etree._Element) -> Block:
    return _new_block("html", {"content": inner_markup(el).strip(), "padding": _padding(el, "html")})


def generate_html(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    attrs = build_attrs([("css-class", "ee-block-html"), ("padding", p.get("padding"))])
    return f"{indent}<mj-text{attrs}>{sanitize_html(str(p.get('content') or ''))}</mj-text>"


# ---------------------------------------------------------------------------
# countdown
# ---------------------------------------------------------------------------


def _parse_target(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        target = datetime.fromisoformat(value)
    except ValueError:
        return None
    return target if target.tzinfo else target.replace(tzinfo=UTC)


def countdown_parts(target_date: Any, now: datetime) -> tuple[int, int, int, int]:
    """(days, hours, minutes, seconds) left until target_date, floored at zero."""
    target = _parse_target(target_date)
    if target is None:
        return 0, 0, 0, 0
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    total = max(0, int((target - now).total_seconds()))
    return total // 86400, total // 3600 % 24, total // 60 % 60, total % 60


def parse_countdown(el: etree._Element) -> Block:
    props = _embedded_params(el, COUNTDOWN_COMMENT_PREFIX)
    props["padding"] = resolve_padding(el, props.get("padding") or DEFAULT_BLOCK_PROPERTIES["countdown"]["padding"])
    if el.get("align"):
        props["align"] = el.get("align")
    return _new_block("countdown", props)


def generate_countdown(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    days, hours, minutes, seconds = countdown_parts(p.get("targetDate"), now)

    digit_style = (
        f"display:inline-block;background-color:{escape_attr(p.get('digitBackgroundColor', ''))};"
        f"color:{escape_attr(p.get('digitColor', ''))};font-size:{escape_attr(p.get('fontSize', ''))};"
        "font-weight:bold;padding:8px 12px;border-radius:6px;min-width:40px;text-align:center"
    )
    unit_style = (
        f"font-size:11px;color:{escape_attr(p.get('labelColor', ''))};"
        "text-transform:uppercase;letter-spacing:0.5px"
    )
    cells = "".join(
        f'<td style="padding:0 6px;text-align:center"><div style="{digit_style}">{value:02d}</div>'
        f'<div style="{unit_style}">{label}</div></td>'
        for value, label in ((days, "Days"), (hours, "Hours"), (minutes, "Minutes"), (seconds, "Seconds"))
    )

    html = ""
    if p.get("label"):
        html += (
            f'<div style="color:{escape_attr(p.get("labelColor", ""))};margin-bottom:8px">'
            f"{escape_content(p['label'])}</div>"
        )
    html += f'<table cellpadding="0" cellspacing="0" role="presentation" style="margin:0 auto"><tr>{cells}</tr></table>'

    attrs = build_attrs([("css-class", "ee-block-countdown"), ("padding", p.get("padding")), ("align", p.get("align"))])
    return f"{indent}<mj-text{attrs}>{_embed_params(COUNTDOWN_COMMENT_PREFIX, p)}{html}</mj-text>"


def validate_countdown(props: dict[str, Any]) -> list[str]:
    errors = _shape_errors("countdown", props)
    if "targetDate" in props and _parse_target(props["targetDate"]) is None:
        errors.append('"targetDate" must be an ISO date-time')
    return errors


# ---------------------------------------------------------------------------
# hero (outside a native mj-hero)
# ---------------------------------------------------------------------------


def parse_hero(el: etree._Element) -> Block:
    props = _embedded_params(el, HERO_COMMENT_PREFIX)
    if not props:
        heading = next((c for c in el.iter(*HEADING_LEVELS)), None)
        paragraph = next((c for c in el.iter("p")), None)
        link = next((c for c in el.iter("a")), None)
        props = {
            "heading": text_content(heading).strip() if heading is not None else "",
            "subtext": text_content(paragraph).strip() if paragraph is not None else "",
            "buttonText": text_content(link).strip() if link is not None else "",
            "buttonHref": link.get("href", "#") if link is not None else "#",
        }
    if el.get("padding"):
        props["padding"] = el.get("padding")
    if el.get("align"):
        props["align"] = el.get("align")
    return _new_block("hero", props)


def generate_hero(block: Block, indent: str, now: datetime) -> str:
    p = block.properties
    html = ""
    if p.get("heading"):
        html += (
            f'<h2 style="color:{escape_attr(p.get("headingColor", ""))};'
            f'font-size:{escape_attr(p.get("headingFontSize", ""))};font-weight:bold;line-height:1.2;margin:0 0 16px">'
            f"{escape_content(p['heading'])}</h2>"
        )
    if p.get("subtext"):
        html += (
            f'<p style="color:{escape_attr(p.get("subtextColor", ""))};'
            f'font-size:{escape_attr(p.get("subtextFontSize", ""))};line-height:1.5;margin:0 0 24px">'
            f"{escape_content(p['subtext'])}</p>"
        )
    if p.get("buttonText"):
        html += (
            f'<a href="{escape_attr(safe_url(str(p.get("buttonHref") or "#")))}" '
            f'style="display:inline-block;background-color:{escape_attr(p.get("buttonBackgroundColor", ""))};'
            f'color:{escape_attr(p.get("buttonColor", ""))};border-radius:{escape_attr(p.get("buttonBorderRadius", ""))};'
            'padding:12px 28px;font-weight:600;font-size:16px;text-decoration:none">'
            f"{escape_content(p['buttonText'])}</a>"
        )

    attrs = build_attrs(
        [
            ("css-class", "ee-block-hero"),
            ("container-background-color", p.get("backgroundColor")),
            ("padding", p.get("padding")),
            ("align", p.get("align")),
        ]
    )
    return f"{indent}<mj-text{attrs}>{_embed_params(HERO_COMMENT_PREFIX, p)}{html}</mj-text>"


# ---------------------------------------------------------------------------
# Handler table
# ---------------------------------------------------------------------------


def _handler(block_type, parse, generate, validate=None, tags=()) -> BlockTypeHandler:
    return BlockTypeHandler(
        type=block_type,
        parse=parse,
        generate=generate,
        validate=validate or partial(_shape_errors, block_type),
        defaults=partial(block_defaults, block_type),
        tags=tags,
    )


BUILT_IN_HANDLERS: tuple[BlockTypeHandler, ...] = (
    _handler("text", parse_text, generate_text, tags=("mj-text",)),
    _handler("button", parse_button, generate_button, tags=("mj-button",)),
    _handler("image", parse_image, generate_image, tags=("mj-image",)),
    _handler("divider", parse_divider, generate_divider, tags=("mj-divider",)),
    _handler("spacer", parse_spacer, generate_spacer, tags=("mj-spacer",)),
    _handler("social", parse_social, generate_social, validate_social, tags=("mj-social",)),
    _handler("menu", parse_menu, generate_menu, validate_menu, tags=("mj-navbar",)),
    _handler("html", parse_html, generate_html),
    _handler("video", parse_video, generate_video),
    _handler("heading", parse_heading, generate_heading, validate_heading),
    _handler("countdown", parse_countdown, generate_countdown, validate_countdown),
    _handler("hero", parse_hero, generate_hero),
)
