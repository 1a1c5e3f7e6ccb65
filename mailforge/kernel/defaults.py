"""
Mailforge Kernel - Defaults

Two separate default tables live here and must not be confused:

  EDITOR defaults  - what a freshly created block/section/template gets.
  DIALECT defaults - what MJML itself assumes when an attribute is absent.
                     The parser uses these so markup the editor did not
                     produce round-trips with the values MJML would render.
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta
from typing import Any

MAX_HISTORY_SIZE = 50

# ---------------------------------------------------------------------------
# Editor defaults
# ---------------------------------------------------------------------------

DEFAULT_SECTION_PROPERTIES: dict[str, Any] = {
    "backgroundColor": "transparent",
    "padding": "20px 0",
    "borderRadius": "0px",
    "fullWidth": False,
}

DEFAULT_GLOBAL_STYLES: dict[str, Any] = {
    "backgroundColor": "#f4f4f4",
    "width": 600,
    "fontFamily": "Arial, sans-serif",
}

DEFAULT_HEAD_METADATA: dict[str, Any] = {
    "title": "",
    "previewText": "",
    "headStyles": [],
}

DEFAULT_COLUMN_WIDTH = "100%"


def _countdown_target() -> str:
    # One week out, minute precision, same shape as an <input type="datetime-local">
    return (datetime.now(UTC) + timedelta(days=7)).strftime("%Y-%m-%dT%H:%M")


DEFAULT_BLOCK_PROPERTIES: dict[str, dict[str, Any]] = {
    "text": {
        "content": "",
        "fontFamily": "Arial, sans-serif",
        "fontSize": "14px",
        "color": "#000000",
        "lineHeight": "1.5",
        "padding": "10px 25px",
        "align": "left",
        "fontWeight": "normal",
        "textTransform": "none",
        "letterSpacing": "normal",
    },
    "button": {
        "text": "Click me",
        "href": "#",
        "backgroundColor": "#2563eb",
        "color": "#ffffff",
        "fontFamily": "Arial, sans-serif",
        "fontSize": "14px",
        "borderRadius": "4px",
        "padding": "10px 25px",
        "innerPadding": "12px 24px",
        "align": "center",
        "width": "auto",
        "fontWeight": "normal",
        "textTransform": "none",
        "letterSpacing": "normal",
    },
    "image": {
        "src": "",
        "alt": "",
        "href": "",
        "width": "600px",
        "height": "auto",
        "padding": "10px 25px",
        "align": "center",
        "fluidOnMobile": True,
    },
    "divider": {
        "borderColor": "#cccccc",
        "borderWidth": "1px",
        "borderStyle": "solid",
        "padding": "10px 25px",
        "width": "100%",
    },
    "spacer": {
        "height": "20px",
    },
    "social": {
        "elements": [
            {"name": "facebook", "href": "https://facebook.com"},
            {"name": "twitter", "href": "https://twitter.com"},
            {"name": "instagram", "href": "https://instagram.com"},
        ],
        "mode": "horizontal",
        "align": "center",
        "iconSize": "20px",
        "iconPadding": "5px",
        "padding": "10px 25px",
        "fontSize": "13px",
        "color": "#333333",
        "borderRadius": "3px",
    },
    "html": {
        "content": "",
        "padding": "10px 25px",
    },
    "video": {
        "src": "",
        "thumbnailUrl": "",
        "alt": "Video",
        "padding": "10px 25px",
        "align": "center",
    },
    "heading": {
        "content": "",
        "level": "h2",
        "fontFamily": "Arial, sans-serif",
        "fontSize": "28px",
        "color": "#000000",
        "lineHeight": "1.5",
        "fontWeight": "bold",
        "padding": "10px 25px",
        "align": "left",
        "textTransform": "none",
        "letterSpacing": "normal",
    },
    "countdown": {
        "targetDate": "",  # filled per instance by block_defaults()
        "label": "Sale ends in",
        "digitBackgroundColor": "#333333",
        "digitColor": "#ffffff",
        "labelColor": "#666666",
        "fontSize": "24px",
        "padding": "10px 25px",
        "align": "center",
    },
    "menu": {
        "items": [
            {"text": "Home", "href": "#"},
            {"text": "About", "href": "#"},
            {"text": "Contact", "href": "#"},
        ],
        "align": "center",
        "fontFamily": "Arial, sans-serif",
        "fontSize": "14px",
        "color": "#333333",
        "padding": "10px 25px",
        "hamburger": False,
        "iconColor": "#333333",
    },
    "hero": {
        "heading": "Welcome to Our Newsletter",
        "subtext": "Stay up to date with our latest news and updates.",
        "buttonText": "Get Started",
        "buttonHref": "#",
        "headingColor": "#333333",
        "headingFontSize": "32px",
        "subtextColor": "#666666",
        "subtextFontSize": "16px",
        "buttonBackgroundColor": "#2563eb",
        "buttonColor": "#ffffff",
        "buttonBorderRadius": "4px",
        "align": "center",
        "padding": "40px 25px",
        "backgroundImage": "",
        "backgroundColor": "#ffffff",
    },
}


def block_defaults(block_type: str) -> dict[str, Any]:
    """Fresh deep copy of the editor defaults for a built-in type ({} if unknown)."""
    props = copy.deepcopy(DEFAULT_BLOCK_PROPERTIES.get(block_type, {}))
    if block_type == "countdown":
        props["targetDate"] = _countdown_target()
    return props


# ---------------------------------------------------------------------------
# Dialect (MJML) defaults
# ---------------------------------------------------------------------------

MJML_DEFAULT_FONT_FAMILY = "Ubuntu, Helvetica, Arial, sans-serif"

MJML_DEFAULTS: dict[str, dict[str, str]] = {
    "mj-body": {
        "background-color": "#ffffff",
        "width": "600px",
    },
    "mj-section": {
        "background-color": "transparent",
        "padding": "20px 0",
        "border-radius": "0px",
    },
    "mj-hero": {
        "background-color": "#ffffff",
        "padding": "0px",
        "align": "center",
    },
    "mj-text": {
        "font-family": MJML_DEFAULT_FONT_FAMILY,
        "font-size": "13px",
        "color": "#000000",
        "line-height": "1",
        "padding": "10px 25px",
        "align": "left",
        "font-weight": "normal",
        "text-transform": "none",
        "letter-spacing": "normal",
    },
    "mj-button": {
        "background-color": "#414141",
        "color": "#ffffff",
        "font-family": MJML_DEFAULT_FONT_FAMILY,
        "font-size": "13px",
        "border-radius": "3px",
        "padding": "10px 25px",
        "inner-padding": "10px 25px",
        "align": "center",
        "width": "auto",
        "font-weight": "normal",
        "text-transform": "none",
        "letter-spacing": "normal",
        "href": "#",
    },
    "mj-image": {
        "align": "center",
        "padding": "10px 25px",
        "height": "auto",
        "width": "",
        "alt": "",
    },
    "mj-divider": {
        "border-color": "#000000",
        "border-style": "solid",
        "border-width": "4px",
        "padding": "10px 25px",
        "width": "100%",
    },
    "mj-spacer": {
        "height": "20px",
    },
    "mj-social": {
        "align": "center",
        "mode": "horizontal",
        "icon-size": "20px",
        "icon-padding": "0px",
        "padding": "10px 25px",
        "font-size": "13px",
        "color": "#333333",
        "border-radius": "3px",
    },
    "mj-navbar": {
        "align": "center",
        "padding": "0px",
        "ico-color": "#000000",
    },
    "mj-navbar-link": {
        "color": "#000000",
        "font-family": MJML_DEFAULT_FONT_FAMILY,
        "font-size": "13px",
    },
}


def mjml_default(tag: str, attr: str) -> str:
    return MJML_DEFAULTS.get(tag, {}).get(attr, "")
