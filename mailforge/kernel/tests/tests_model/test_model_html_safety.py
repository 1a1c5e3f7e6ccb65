"""
Mailforge Model -- HTML Safety

Escaping, URL scheme checks, inline style filtering and the raw-HTML
sanitizer used for html blocks.
"""

import pytest

from mailforge.kernel.html_safety import (
    escape_attr,
    escape_content,
    is_safe_image_src,
    is_safe_url,
    safe_image_src,
    safe_url,
    sanitize_html,
    sanitize_style,
)


class TestEscaping:
    def test_attribute_escapes_quotes(self):
        assert escape_attr('a "b" & \'c\' <d>') == "a &quot;b&quot; &amp; &#x27;c&#x27; &lt;d&gt;"

    def test_content_keeps_quotes(self):
        assert escape_content('a "b" & <c>') == 'a "b" &amp; &lt;c&gt;'

    def test_non_strings(self):
        assert escape_attr(600) == "600"


class TestUrls:
    """Only navigable schemes survive."""

    @pytest.mark.parametrize(
        "url",
        ["https://example.com", "http://x.org/a?b=1", "mailto:a@b.c", "tel:+123", "#top", "/path", "?q=1", "  https://x.y"],
    )
    def test_safe(self, url):
        assert is_safe_url(url)
        assert safe_url(url) == url

    @pytest.mark.parametrize(
        "url",
        ["javascript:alert(1)", "JavaScript:alert(1)", "vbscript:msgbox", "data:text/html,<b>", "", "   ", "ftp://x"],
    )
    def test_unsafe(self, url):
        assert not is_safe_url(url)
        assert safe_url(url) == "#"

    def test_image_src_allows_raster_data(self):
        assert is_safe_image_src("data:image/png;base64,AAAA")
        assert safe_image_src("data:image/gif;base64,R0lG") == "data:image/gif;base64,R0lG"

    def test_image_src_rejects_svg_data(self):
        assert not is_safe_image_src("data:image/svg+xml;base64,PHN2Zz4=")
        assert safe_image_src("javascript:alert(1)") == "#"


class TestSanitizeStyle:
    def test_keeps_allowed(self):
        assert sanitize_style("color: red; FONT-SIZE:12px") == "color: red; font-size: 12px"

    def test_drops_unknown_and_dangerous(self):
        style = "position: fixed; color: expression(alert(1)); background: url(javascript:x); width: 10px"
        assert sanitize_style(style) == "width: 10px"

    def test_drops_any_url(self):
        assert sanitize_style("background: url(https://x.y/a.png)") == ""


class TestSanitizeHtml:
    """Raw HTML reduced to an email-safe subset."""

    def test_empty(self):
        assert sanitize_html("") == ""

    def test_allowed_markup_kept(self):
        assert sanitize_html("<p><b>Hi</b> <a href=\"https://x.y\">there</a></p>") == (
            '<p><b>Hi</b> <a href="https://x.y">there</a></p>'
        )

    def test_script_removed_with_content(self):
        assert sanitize_html("<p>a</p><script>alert(1)</script><style>p{}</style>") == "<p>a</p>"

    def test_disallowed_tag_becomes_text(self):
        assert sanitize_html("<p><marquee>moving</marquee></p>") == "<p>moving</p>"

    def test_event_handlers_dropped(self):
        assert sanitize_html('<p onclick="x()" class="c">t</p>') == '<p class="c">t</p>'

    def test_unsafe_href_neutralized(self):
        assert sanitize_html('<a href="javascript:alert(1)">x</a>') == '<a href="#">x</a>'

    def test_unsafe_src_removed(self):
        assert sanitize_html('<img alt="a" src="javascript:x"/>') == '<img alt="a"/>'

    def test_style_filtered(self):
        assert sanitize_html('<span style="color:red;position:absolute">x</span>') == (
            '<span style="color: red">x</span>'
        )

    def test_comments_removed(self):
        assert sanitize_html("<p>a<!-- secret --></p>") == "<p>a</p>"
