from quiz_player.core.markdown_math_renderer import MarkdownMathRenderer


def test_fragment_renders_markdown_and_keeps_math():
    html = MarkdownMathRenderer().render_fragment("**Bold** and $x^2$")

    assert "<strong>Bold</strong>" in html
    assert "$x^2$" in html


def test_empty_content_has_placeholder():
    assert "No content provided" in MarkdownMathRenderer().render_fragment("   ")
    assert "No content provided" in MarkdownMathRenderer().render_fragment(None)


def test_raw_html_is_escaped_by_default():
    html = MarkdownMathRenderer().render_fragment("<script>alert(1)</script>")

    assert "<script>" not in html


def test_full_document_loads_mathjax_and_escapes_title():
    document = MarkdownMathRenderer().render_full_document("Hi", title="A <b> title", font_size=18)

    assert "mathjax" in document
    assert "A &lt;b&gt; title" in document
    assert "font-size: 18pt" in document
