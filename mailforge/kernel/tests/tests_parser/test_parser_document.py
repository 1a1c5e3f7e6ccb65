"""
Mailforge Parser -- Document Structure

Preprocessing, error reporting, head metadata, global styles, and the
section / column walk.
"""

import pytest

from mailforge.kernel.errors import MailforgeError, ParseError
from mailforge.kernel.parser import decode_named_entities, parse_mjml, preprocess, self_close_void_elements

# ============================================================================
# Fixtures
# ============================================================================


def body(content, head=""):
    return f"<mjml><mj-head>{head}</mj-head><mj-body>{content}</mj-body></mjml>"


# ============================================================================
# Preprocessing
# ============================================================================


class TestPreprocess:
    """HTML-isms are made well-formed before XML parsing."""

    def test_named_entities_decoded(self):
        assert decode_named_entities("a&nbsp;b&copy;") == "a\u00a0b©"

    def test_xml_entities_kept(self):
        text = "&amp; &lt; &gt; &apos; &quot;"
        assert decode_named_entities(text) == text

    def test_numeric_entities_kept(self):
        assert decode_named_entities("&#160;&#x2014;") == "&#160;&#x2014;"

    def test_unknown_entity_kept(self):
        assert decode_named_entities("&bogus;") == "&bogus;"

    def test_void_elements_closed(self):
        assert self_close_void_elements('a<br>b<img src="x.png">') == 'a<br />b<img src="x.png" />'

    def test_already_closed_untouched(self):
        text = "<br/><hr /><img src='x' />"
        assert self_close_void_elements(text) == text

    def test_idempotent(self):
        once = preprocess("<p>a<br>&nbsp;</p>")
        assert preprocess(once) == once

    def test_document_with_html_isms_parses(self):
        template = parse_mjml(body("<mj-section><mj-column><mj-text>a<br>b&nbsp;c</mj-text></mj-column></mj-section>"))
        content = template.sections[0].columns[0].blocks[0].properties["content"]
        assert content == "a<br/>b\u00a0c"


# ============================================================================
# Errors
# ============================================================================


class TestParseErrors:
    """Only malformed text or a missing root raise."""

    def test_empty(self):
        with pytest.raises(ParseError, match="empty document"):
            parse_mjml("   ")

    def test_malformed_xml(self):
        with pytest.raises(ParseError) as exc_info:
            parse_mjml("<mjml>\n<mj-body>\n<mj-section></mj-body>\n</mjml>")
        message = str(exc_info.value)
        assert message.startswith("Invalid MJML:")
        assert len(message) <= len("Invalid MJML: ") + 200

    def test_missing_root(self):
        with pytest.raises(ParseError, match="missing <mjml> root"):
            parse_mjml("<html><body /></html>")

    def test_is_kernel_error(self):
        assert issubclass(ParseError, MailforgeError)

    def test_missing_body_is_empty_template(self):
        assert parse_mjml("<mjml></mjml>").sections == []


# ============================================================================
# Head and global styles
# ============================================================================


class TestHead:
    def test_title_and_preview(self):
        template = parse_mjml(body("", head="<mj-title>Launch</mj-title><mj-preview>Big news</mj-preview>"))
        assert template.head_metadata.title == "Launch"
        assert template.head_metadata.preview_text == "Big news"

    def test_user_styles_kept_reset_dropped(self):
        head = (
            "<mj-style>\n  p, h1, h2, h3, h4, h5, h6, ul, ol, li, blockquote { margin: 0; }\n</mj-style>"
            "<mj-style>.promo { color: red; }</mj-style>"
            "<mj-style>   </mj-style>"
        )
        assert parse_mjml(body("", head=head)).head_metadata.head_styles == [".promo { color: red; }"]

    def test_dialect_defaults(self):
        gs = parse_mjml(body("")).global_styles
        assert gs.background_color == "#ffffff"
        assert gs.width == 600
        assert gs.font_family == "Ubuntu, Helvetica, Arial, sans-serif"

    def test_body_and_mj_all(self):
        text = (
            '<mjml><mj-head><mj-attributes><mj-all font-family="Lato, sans-serif" /></mj-attributes></mj-head>'
            '<mj-body background-color="#eeeeee" width="640px"></mj-body></mjml>'
        )
        gs = parse_mjml(text).global_styles
        assert (gs.background_color, gs.width, gs.font_family) == ("#eeeeee", 640, "Lato, sans-serif")


# ============================================================================
# Sections and columns
# ============================================================================


class TestSections:
    """Body walk."""

    def test_section_properties(self):
        text = body(
            '<mj-section background-color="#123456" padding="5px" border-radius="8px" full-width="full-width" '
            'background-url="https://x.y/bg.png" background-size="cover" background-repeat="no-repeat">'
            "<mj-column></mj-column></mj-section>"
        )
        assert parse_mjml(text).sections[0].properties == {
            "backgroundColor": "#123456",
            "padding": "5px",
            "borderRadius": "8px",
            "fullWidth": True,
            "backgroundImage": "https://x.y/bg.png",
            "backgroundSize": "cover",
            "backgroundRepeat": "no-repeat",
        }

    def test_section_defaults(self):
        props = parse_mjml(body("<mj-section><mj-column /></mj-section>")).sections[0].properties
        assert props == {"backgroundColor": "transparent", "padding": "20px 0", "borderRadius": "0px", "fullWidth": False}

    def test_padding_sides(self):
        text = body('<mj-section padding-top="10px" padding-left="4px"><mj-column /></mj-section>')
        assert parse_mjml(text).sections[0].properties["padding"] == "10px 0 0 4px"

    @pytest.mark.parametrize("count,width", [(1, "100%"), (2, "50%"), (3, "33.33%"), (4, "25%"), (6, "16.67%")])
    def test_auto_column_widths(self, count, width):
        text = body("<mj-section>" + "<mj-column></mj-column>" * count + "</mj-section>")
        columns = parse_mjml(text).sections[0].columns
        assert [c.width for c in columns] == [width] * count

    def test_explicit_width_kept(self):
        text = body('<mj-section><mj-column width="30%" /><mj-column /></mj-section>')
        assert [c.width for c in parse_mjml(text).sections[0].columns] == ["30%", "50%"]

    def test_group_columns(self):
        text = body("<mj-section><mj-group><mj-column /><mj-column /></mj-group><mj-column /></mj-section>")
        assert len(parse_mjml(text).sections[0].columns) == 3

    def test_no_columns_synthesizes_one(self):
        text = body("<mj-section><mj-text>a</mj-text><mj-button>b</mj-button></mj-section>")
        columns = parse_mjml(text).sections[0].columns
        assert len(columns) == 1
        assert columns[0].width == "100%"
        assert [b.type for b in columns[0].blocks] == ["text", "button"]

    def test_wrapper_hoists_sections(self):
        text = body(
            "<mj-wrapper><mj-section><mj-column /></mj-section><mj-section><mj-column /></mj-section></mj-wrapper>"
            "<mj-section><mj-column /></mj-section>"
        )
        assert len(parse_mjml(text).sections) == 3

    def test_unknown_elements_skipped(self):
        text = body(
            "<mj-raw>x</mj-raw><mj-section><mj-column><mj-carousel /><mj-text>kept</mj-text>"
            "<!-- note --></mj-column></mj-section>"
        )
        template = parse_mjml(text)
        assert len(template.sections) == 1
        assert [b.type for b in template.sections[0].columns[0].blocks] == ["text"]

    def test_fresh_ids(self):
        text = body("<mj-section><mj-column><mj-text>a</mj-text></mj-column></mj-section>")
        a = parse_mjml(text).sections[0]
        b = parse_mjml(text).sections[0]
        assert a.id != b.id
        assert a.columns[0].blocks[0].id != b.columns[0].blocks[0].id
