"""Tests for the markdown-to-HTML renderer."""

from __future__ import annotations

from contentctl.services.markdown import render_markdown


class TestRenderMarkdown:
    def test_empty(self) -> None:
        assert render_markdown("  \n ") == ""

    def test_headings_and_paragraphs(self) -> None:
        html = render_markdown("# Title\nIntro line\n\nSecond para")
        assert html.splitlines() == ["<h1>Title</h1>", "<p>Intro line</p>", "<p>Second para</p>"]

    def test_inline_markup(self) -> None:
        html = render_markdown("**bold** and *em* and `x < y` and [docs](https://example.com)")
        assert "<strong>bold</strong>" in html
        assert "<em>em</em>" in html
        assert "<code>x &lt; y</code>" in html
        assert '<a href="https://example.com" target="_blank" rel="noopener noreferrer">docs</a>' in html

    def test_fenced_code_stays_literal(self) -> None:
        html = render_markdown("```python\n# not a heading\nprint(**kw)\n```")
        assert html == "<pre><code># not a heading\nprint(**kw)</code></pre>"

    def test_line_breaks_within_paragraph(self) -> None:
        assert render_markdown("one\ntwo") == "<p>one<br>two</p>"
