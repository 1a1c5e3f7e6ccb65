"""
Mailforge Kernel - MJML Parser

parse_mjml(text) -> Template

Untrusted MJML text in, a fresh Template out. Raises ParseError only when
the text is not well-formed after preprocessing or has no <mjml> root;
anything unrecognized past that point is skipped, anything missing is
defaulted from MJML's own built-in values.

Preprocessing (HTML editors produce text that strict XML rejects):
  1. named entities other than amp/lt/gt/apos/quot -> literal characters
  2. HTML void elements (<br>, <img ...>) -> self-closed, unless already so

Body walk:
  mj-section  -> Section
  mj-wrapper  -> its mj-section children, hoisted
  mj-hero     -> a Section; see _parse_hero()
"""

from __future__ import annotations

import logging
import re
from html.entities import html5 as _HTML5_ENTITIES

from lxml import etree

from mailforge.kernel.defaults import (
    DEFAULT_BLOCK_PROPERTIES,
    DEFAULT_SECTION_PROPERTIES,
    MJML_DEFAULT_FONT_FAMILY,
    mjml_default,
)
from mailforge.kernel.errors import ParseError
from mailforge.kernel.ids import generate_block_id, generate_column_id, generate_section_id
from mailforge.kernel.markup import (
    RESET_CSS,
    attr,
    child_elements,
    css_classes,
    format_percent,
    resolve_padding,
    text_content,
)
from mailforge.kernel.registry import BlockRegistry, get_default_registry
from mailforge.kernel.types import Block, Column, GlobalStyles, HeadMetadata, Section, Template

logger = logging.getLogger(__name__)

_XML_ENTITIES = frozenset({"amp", "lt", "gt", "apos", "quot"})
_XML_SPECIAL = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}
_NAMED_ENTITY_RE = re.compile(r"&([a-zA-Z][a-zA-Z0-9]*);")

VOID_ELEMENTS = ("area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr")
_VOID_RE = re.compile(r"<(" + "|".join(VOID_ELEMENTS) + r")\b([^<>]*?)(/?)>", re.IGNORECASE)

_HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_mjml(text: str, registry: BlockRegistry | None = None) -> Template:
    reg = registry or get_default_registry()
    root = _read_document(text)

    return Template(
        sections=_parse_sections(root, reg),
        global_styles=_parse_global_styles(root),
        head_metadata=_parse_head_metadata(root),
    )


# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------


def decode_named_entities(text: str) -> str:
    """Decode HTML named entities XML does not know. Numeric entities are left as-is."""

    def _decode(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in _XML_ENTITIES:
            return match.group(0)
        char = _HTML5_ENTITIES.get(f"{name};")
        if char is None:
            return match.group(0)
        return "".join(_XML_SPECIAL.get(c, c) for c in char)

    return _NAMED_ENTITY_RE.sub(_decode, text)


def self_close_void_elements(text: str) -> str:
    """<br> -> <br />, <img src="x"> -> <img src="x" />. Already self-closed tags are kept."""

    def _close(match: re.Match[str]) -> str:
        if match.group(3):
            return match.group(0)
        return f"<{match.group(1)}{match.group(2).rstrip()} />"

    return _VOID_RE.sub(_close, text)


def preprocess(text: str) -> str:
    return self_close_void_elements(decode_named_entities(text))


def _read_document(text: str) -> etree._Element:
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Invalid MJML: empty document")

    source = preprocess(text)
    xml_parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)
    try:
        root = etree.fromstring(source.encode("utf-8"), parser=xml_parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Invalid MJML: {_error_detail(e, source)}") from e

    if root.tag != "mjml":
        raise ParseError("Invalid MJML: missing <mjml> root element")
    return root


def _error_detail(error: etree.XMLSyntaxError, source: str) -> str:
    message = error.msg or str(error)
    lines = source.splitlines()
    lineno = error.lineno or 0
    if 1 <= lineno <= len(lines):
        fragment = lines[lineno - 1].strip()
        message = f"{message} at line {lineno}: {fragment}"
    return message[:200]


# ---------------------------------------------------------------------------
# Head and global styles
# ---------------------------------------------------------------------------


def _leading_int(value: str | None, fallback: int) -> int:
    match = re.match(r"\s*(\d+)", value or "")
    return int(match.group(1)) if match else fallback


def _parse_global_styles(root: etree._Element) -> GlobalStyles:
    body = root.find("mj-body")
    mj_all = root.find(".//mj-attributes/mj-all")

    background = mjml_default("mj-body", "background-color")
    width = _leading_int(mjml_default("mj-body", "width"), 600)
    if body is not None:
        background = body.get("background-color") or background
        width = _leading_int(body.get("width"), width)

    font_family = MJML_DEFAULT_FONT_FAMILY
    if mj_all is not None and mj_all.get("font-family"):
        font_family = mj_all.get("font-family")

    return GlobalStyles(background_color=background, width=width, font_family=font_family)


def _parse_head_metadata(root: etree._Element) -> HeadMetadata:
    metadata = HeadMetadata()
    head = root.find("mj-head")
    if head is None:
        return metadata

    title = head.find("mj-title")
    if title is not None:
        metadata.title = text_content(title)
    preview = head.find("mj-preview")
    if preview is not None:
        metadata.preview_text = text_content(preview)

    for style in head.iter("mj-style"):
        content = text_content(style)
        if not content.strip() or content.strip() == RESET_CSS:
            continue
        metadata.head_styles.append(content)
    return metadata


# ---------------------------------------------------------------------------
# Sections and columns
# ---------------------------------------------------------------------------


def _parse_sections(root: etree._Element, reg: BlockRegistry) -> list[Section]:
    body = root.find("mj-body")
    if body is None:
        return []

    sections: list[Section] = []
    for child in child_elements(body):
        if child.tag == "mj-section":
            sections.append(_parse_section(child, reg))
        elif child.tag == "mj-wrapper":
            sections.extend(_parse_section(s, reg) for s in child_elements(child, "mj-section"))
        elif child.tag == "mj-hero":
            sections.append(_parse_hero(child, reg))
        else:
            logger.debug("Skipping unsupported body element <%s>", child.tag)
    return sections


def _section_properties(el: etree._Element) -> dict:
    properties = dict(DEFAULT_SECTION_PROPERTIES)
    properties["backgroundColor"] = attr(el, "background-color", properties["backgroundColor"])
    properties["padding"] = resolve_padding(el, properties["padding"])
    properties["borderRadius"] = attr(el, "border-radius", properties["borderRadius"])
    properties["fullWidth"] = el.get("full-width") == "full-width"
    if el.get("background-url"):
        properties["backgroundImage"] = el.get("background-url")
    if el.get("background-size"):
        properties["backgroundSize"] = el.get("background-size")
    if el.get("background-repeat"):
        properties["backgroundRepeat"] = el.get("background-repeat")
    return properties


def _parse_section(el: etree._Element, reg: BlockRegistry) -> Section:
    column_els: list[etree._Element] = []
    for child in child_elements(el):
        if child.tag == "mj-column":
            column_els.append(child)
        elif child.tag == "mj-group":
            column_els.extend(child_elements(child, "mj-column"))

    if column_els:
        auto_width = format_percent(round(100 / len(column_els), 2))
        columns = [
            Column(id=generate_column_id(), width=c.get("width") or auto_width, blocks=parse_blocks(c, reg))
            for c in column_els
        ]
    else:
        columns = [Column(id=generate_column_id(), width="100%", blocks=parse_blocks(el, reg))]

    return Section(id=generate_section_id(), columns=columns, properties=_section_properties(el))


def parse_blocks(parent: etree._Element, reg: BlockRegistry) -> list[Block]:
    """Blocks for every direct child the registry can parse; the rest is skipped."""
    blocks: list[Block] = []
    for child in child_elements(parent):
        if child.tag in ("mj-column", "mj-group"):
            continue
        handler = reg.handler_for_element(child.tag, css_classes(child))
        if handler is None or handler.parse is None:
            logger.debug("Skipping unrecognized element <%s>", child.tag)
            continue
        block = handler.parse(child)
        if block is not None:
            blocks.append(block)
    return blocks


# ---------------------------------------------------------------------------
# Hero
# ---------------------------------------------------------------------------


def _parse_hero(el: etree._Element, reg: BlockRegistry) -> Section:
    """
    An mj-hero with an image child cannot be a hero block (one background
    only), so it becomes a plain one-column section of its children. Without
    one it becomes a single hero block built by scanning the children:

      first mj-text holding h1-h6  -> heading
      next mj-text                 -> subtext
      mj-button                    -> button text/href/colors/radius

    A lone subtext is promoted to the heading so it is not lost.
    """
    properties = dict(DEFAULT_SECTION_PROPERTIES)
    children = child_elements(el)

    if any(c.tag == "mj-image" for c in children):
        if el.get("background-color"):
            properties["backgroundColor"] = el.get("background-color")
        if el.get("background-url"):
            properties["backgroundImage"] = el.get("background-url")
        properties["padding"] = resolve_padding(el, mjml_default("mj-hero", "padding"))
        column = Column(id=generate_column_id(), width="100%", blocks=parse_blocks(el, reg))
        return Section(id=generate_section_id(), columns=[column], properties=properties)

    column = Column(id=generate_column_id(), width="100%", blocks=[_hero_block(el, children, reg)])
    return Section(id=generate_section_id(), columns=[column], properties=properties)


def _hero_block(el: etree._Element, children: list[etree._Element], reg: BlockRegistry) -> Block:
    hero_defaults = DEFAULT_BLOCK_PROPERTIES["hero"]
    props = reg.defaults_for("hero")
    props.update({"heading": "", "subtext": "", "buttonText": ""})

    found_heading = False
    found_subtext = False
    for child in children:
        if child.tag == "mj-text":
            has_heading = any(True for _ in child.iter(*_HEADING_TAGS))
            if has_heading and not found_heading:
                props["heading"] = text_content(child).strip()
                props["headingColor"] = attr(child, "color", hero_defaults["headingColor"])
                props["headingFontSize"] = attr(child, "font-size", hero_defaults["headingFontSize"])
                found_heading = True
            elif not found_subtext:
                props["subtext"] = text_content(child).strip()
                props["subtextColor"] = attr(child, "color", hero_defaults["subtextColor"])
                props["subtextFontSize"] = attr(child, "font-size", hero_defaults["subtextFontSize"])
                found_subtext = True
        elif child.tag == "mj-button":
            props["buttonText"] = text_content(child).strip()
            props["buttonHref"] = attr(child, "href", hero_defaults["buttonHref"])
            props["buttonBackgroundColor"] = attr(child, "background-color", hero_defaults["buttonBackgroundColor"])
            props["buttonColor"] = attr(child, "color", hero_defaults["buttonColor"])
            props["buttonBorderRadius"] = attr(child, "border-radius", hero_defaults["buttonBorderRadius"])
        else:
            continue
        if child.get("align"):
            props["align"] = child.get("align")

    if not found_heading and found_subtext:
        props["heading"] = props["subtext"]
        props["headingColor"] = props["subtextColor"]
        props["headingFontSize"] = props["subtextFontSize"]
        props["subtext"] = ""

    props["backgroundColor"] = attr(el, "background-color", mjml_default("mj-hero", "background-color"))
    props["backgroundImage"] = attr(el, "background-url", "")
    props["padding"] = resolve_padding(el, mjml_default("mj-hero", "padding"))
    return Block(id=generate_block_id(), type="hero", properties=props)
