"""
Mailforge Generator -- Document Output

Head assembly, web fonts, body attributes, escaping and URL safety.
The generator is total: odd property values are neutralized, never raised on.
"""

from mailforge.kernel.factory import create_block, create_section
from mailforge.kernel.generator import generate_mjml, used_web_fonts
from mailforge.kernel.types import Block, Column, GlobalStyles, HeadMetadata, Section, Template

# ============================================================================
# Fixtures
# ============================================================================


def template_with(*blocks, **template_kwargs):
    section = create_section()
    section.columns[0].blocks.extend(blocks)
    return Template(sections=[section], **template_kwargs)


def block(block_type, **props):
    b = create_block(block_type)
    b.properties.update(props)
    return b


# ============================================================================
# Head
# ============================================================================


class TestHead:
    def test_skeleton(self):
        mjml = generate_mjml(Template())
        lines = mjml.split("\n")
        assert lines[0] == "<mjml>"
        assert lines[1] == "  <mj-head>"
        assert lines[-1] == "</mjml>"
        assert '  <mj-body background-color="#f4f4f4" width="600px">' in lines
        assert '      <mj-all font-family="Arial, sans-serif" />' in lines

    def test_reset_style(self):
        mjml = generate_mjml(Template())
        assert "    <mj-style>\n      p, h1, h2, h3, h4, h5, h6, ul, ol, li, blockquote { margin: 0; }\n    </mj-style>" in mjml

    def test_title_and_preview_escaped(self):
        head = HeadMetadata(title="Tom & Jerry <3", preview_text="Save 20% > today")
        mjml = generate_mjml(Template(head_metadata=head))
        assert "<mj-title>Tom &amp; Jerry &lt;3</mj-title>" in mjml
        assert "<mj-preview>Save 20% &gt; today</mj-preview>" in mjml

    def test_empty_title_omitted(self):
        assert "<mj-title>" not in generate_mjml(Template())

    def test_user_styles_cannot_close_head(self):
        head = HeadMetadata(head_styles=[".a { color: red; }", "</mj-head><mj-body>"])
        mjml = generate_mjml(Template(head_metadata=head))
        assert "<mj-style>.a { color: red; }</mj-style>" in mjml
        assert mjml.count("</mj-head") == 1

    def test_width_written_in_pixels(self):
        mjml = generate_mjml(Template(global_styles=GlobalStyles(width=640, background_color="#000000")))
        assert '<mj-body background-color="#000000" width="640px">' in mjml


class TestWebFonts:
    """One mj-font per distinct hosted family in use."""

    def test_global_and_block_fonts(self):
        template = template_with(
            block("text", fontFamily="'Open Sans', Arial, sans-serif"),
            block("button", fontFamily="Roboto"),
            global_styles=GlobalStyles(font_family="Roboto, sans-serif"),
        )
        assert [name for name, _ in used_web_fonts(template)] == ["Roboto", "Open Sans"]
        mjml = generate_mjml(template)
        assert '<mj-font name="Roboto" href="https://fonts.googleapis.com/css?family=Roboto:400,700" />' in mjml
        assert '<mj-font name="Open Sans" href="https://fonts.googleapis.com/css?family=Open+Sans:400,700" />' in mjml
        assert mjml.count("<mj-font") == 2

    def test_system_fonts_need_no_import(self):
        assert used_web_fonts(template_with(block("text"))) == []
        assert "<mj-font" not in generate_mjml(template_with(block("text")))


# ============================================================================
# Sections
# ============================================================================


class TestSections:
    def test_section_attributes(self):
        section = create_section(["40%", "60%"])
        section.properties.update(
            {"backgroundColor": "#fafafa", "fullWidth": True, "backgroundImage": "https://x.y/bg.png", "backgroundSize": "cover"}
        )
        mjml = generate_mjml(Template(sections=[section]))
        assert (
            '<mj-section background-color="#fafafa" padding="20px 0" border-radius="0px" full-width="full-width" '
            'background-url="https://x.y/bg.png" background-size="cover">'
        ) in mjml
        assert '<mj-column width="40%">' in mjml
        assert '<mj-column width="60%">' in mjml

    def test_unsafe_background_image(self):
        section = create_section()
        section.properties["backgroundImage"] = "javascript:alert(1)"
        assert 'background-url="#"' in generate_mjml(Template(sections=[section]))

    def test_unknown_block_type_omitted(self):
        section = Section(id="s", columns=[Column(id="c", blocks=[Block(id="b", type="carousel")])])
        mjml = generate_mjml(Template(sections=[section]))
        assert "carousel" not in mjml
        assert "<mj-column" in mjml


# ============================================================================
# Safety
# ============================================================================


class TestSafety:
    """Every href/src goes through the scheme check; every value is escaped."""

    def test_javascript_href_neutralized(self):
        mjml = generate_mjml(template_with(block("button", href="javascript:alert(1)")))
        assert 'href="#"' in mjml
        assert "javascript" not in mjml

    def test_unsafe_links_everywhere(self):
        template = template_with(
            block("image", src="javascript:x", href="vbscript:y"),
            block("menu", items=[{"text": "Bad", "href": "javascript:z"}]),
            block("social", elements=[{"name": "web", "href": "data:text/html,x"}]),
            block("text"),
        )
        mjml = generate_mjml(template)
        assert "javascript" not in mjml
        assert "vbscript" not in mjml
        assert "data:text" not in mjml

    def test_native_hero_button_href(self):
        mjml = generate_mjml(template_with(block("hero", buttonHref="javascript:w")))
        assert "<mj-hero" in mjml
        assert "javascript" not in mjml

    def test_marker_hero_link_neutralized(self):
        mjml = generate_mjml(template_with(block("hero", buttonHref="javascript:w"), block("text")))
        assert '<a href="#"' in mjml

    def test_attribute_injection_escaped(self):
        mjml = generate_mjml(template_with(block("button", backgroundColor='red" onclick="x')))
        assert 'background-color="red&quot; onclick=&quot;x"' in mjml

    def test_button_text_escaped(self):
        mjml = generate_mjml(template_with(block("button", text="<b>Buy</b> & save")))
        assert ">&lt;b&gt;Buy&lt;/b&gt; &amp; save</mj-button>" in mjml

    def test_html_block_sanitized(self):
        mjml = generate_mjml(template_with(block("html", content='<p onclick="x">ok</p><script>bad()</script>')))
        assert '<mj-text css-class="ee-block-html" padding="10px 25px"><p>ok</p></mj-text>' in mjml

    def test_odd_values_never_raise(self):
        template = template_with(
            block("text", content=None, fontSize=12),
            block("button", href=None, text=None),
            block("image", src=5),
            block("social", elements=5),
            block("menu", items=None),
            block("countdown", targetDate=5, label=7),
            block("heading", level="h9", content=3),
            block("video", thumbnailUrl=5),
            block("hero", heading=None, backgroundImage=3),
            global_styles=GlobalStyles(width="wide", font_family=None),
            head_metadata=HeadMetadata(head_styles=[5]),
        )
        mjml = generate_mjml(template)
        assert mjml.startswith("<mjml>")
        assert 'width="600px"' in mjml
