"""Tests for article extraction and Markdown conversion."""

import pytest

from fetchmd.conversion import ArticleExtractor, ExtractionError, ExtractResult, HtmlToMarkdown

FILLER = "This paragraph has enough words to make the article look like real content. " * 3

ARTICLE_PAGE = f"""
<html>
<head>
    <title>Getting Started | Example Docs</title>
    <meta name="description" content="How to get started with Example.">
</head>
<body>
    <nav><a href="/home">Home</a><a href="/docs">Docs</a></nav>
    <header class="site-header">Example Docs header</header>
    <article>
        <h1>Getting Started</h1>
        <p>{FILLER}</p>
        <p>See the <a href="/guide/install">install guide</a> for details.</p>
        <div class="ad-banner">Buy now!</div>
        <img src="/img/diagram.png" alt="Diagram">
    </article>
    <aside class="sidebar">Related links</aside>
    <footer>Copyright 2024</footer>
</body>
</html>
"""


class TestArticleExtractor:
    """Tests for ArticleExtractor."""

    def setup_method(self):
        self.extractor = ArticleExtractor()

    def test_extracts_article(self):
        """Test that the article is kept and boilerplate removed."""
        result = self.extractor.extract(ARTICLE_PAGE)

        assert isinstance(result, ExtractResult)
        assert "enough words" in result.content
        assert "Home" not in result.content
        assert "Copyright" not in result.content
        assert "Related links" not in result.content
        assert "Buy now" not in result.content

    def test_title_prefers_h1_inside_title(self):
        """Test the h1 wins when the title tag carries a site suffix."""
        result = self.extractor.extract(ARTICLE_PAGE)
        assert result.title == "Getting Started"

    def test_title_heading_not_repeated(self):
        """Test the h1 matching the title is dropped from the content."""
        result = self.extractor.extract(ARTICLE_PAGE)
        assert "<h1>" not in result.content

    def test_og_title(self):
        html = f"""<html><head><title>Site</title>
        <meta property="og:title" content="Open Graph Title"></head>
        <body><main><p>{FILLER}</p></main></body></html>"""
        result = self.extractor.extract(html)
        assert result.title == "Open Graph Title"

    def test_no_title(self):
        result = self.extractor.extract(f"<html><body><article><p>{FILLER}</p></article></body></html>")
        assert result.title == ""

    def test_excerpt_from_meta_description(self):
        result = self.extractor.extract(ARTICLE_PAGE)
        assert result.excerpt == "How to get started with Example."

    def test_excerpt_from_first_paragraph(self):
        """Test the excerpt falls back to the first paragraph, truncated."""
        long_text = "word " * 100
        html = f"<html><body><article><p>{long_text}</p></article></body></html>"

        result = self.extractor.extract(html)

        assert result.excerpt is not None
        assert result.excerpt.endswith("...")
        assert len(result.excerpt) <= 203

    def test_resolves_relative_links(self):
        """Test relative hrefs and srcs become absolute with a base URL."""
        result = self.extractor.extract(ARTICLE_PAGE, "https://docs.example.com/start/")

        assert 'href="https://docs.example.com/guide/install"' in result.content
        assert 'src="https://docs.example.com/img/diagram.png"' in result.content

    def test_links_untouched_without_url(self):
        result = self.extractor.extract(ARTICLE_PAGE)
        assert 'href="/guide/install"' in result.content

    def test_strips_attributes(self):
        """Test non-whitelisted attributes are removed."""
        html = f'<html><body><article><p onclick="evil()" data-x="1" style="color:red">{FILLER}</p></article></body></html>'

        result = self.extractor.extract(html)

        assert "onclick" not in result.content
        assert "data-x" not in result.content
        assert "style=" not in result.content

    def test_falls_back_to_body(self):
        """Test that a page with no article container uses the body."""
        html = "<html><body><div><p>Short body text.</p></div></body></html>"

        result = self.extractor.extract(html)

        assert "Short body text." in result.content

    def test_custom_content_selectors(self):
        extractor = ArticleExtractor(content_selectors=[".story"])
        html = f'<html><body><div class="story"><p>{FILLER}</p></div><div>Other</div></body></html>'

        result = extractor.extract(html)

        assert "enough words" in result.content
        assert "Other" not in result.content

    @pytest.mark.parametrize("html", ["", "   \n  "])
    def test_empty_html(self, html):
        """Test that empty input raises ExtractionError."""
        with pytest.raises(ExtractionError, match="empty HTML"):
            self.extractor.extract(html)

    def test_no_content(self):
        """Test a document with nothing readable raises ExtractionError."""
        with pytest.raises(ExtractionError, match="No extractable content"):
            self.extractor.extract("<html><head><title>x</title></head><body>  </body></html>")


class TestHtmlToMarkdown:
    """Tests for HtmlToMarkdown."""

    def setup_method(self):
        self.converter = HtmlToMarkdown()

    def test_headings_and_paragraphs(self):
        markdown = self.converter.convert("<h2>Section</h2><p>Some <strong>bold</strong> text.</p>")

        assert "## Section" in markdown
        assert "**bold**" in markdown

    def test_inline_links(self):
        markdown = self.converter.convert('<p>Read <a href="https://example.com/doc">the docs</a>.</p>')
        assert "[the docs](https://example.com/doc)" in markdown

    def test_relative_link_with_base(self):
        """Test links resolve against the base URL."""
        markdown = self.converter.convert('<p><a href="/doc">Docs</a></p>', "https://example.com/a/")
        assert "(https://example.com/doc)" in markdown

    def test_unordered_list_marker(self):
        markdown = self.converter.convert("<ul><li>One</li><li>Two</li></ul>")
        assert "- One" in markdown
        assert "- Two" in markdown

    def test_fenced_code_with_language(self):
        """Test pre/code blocks become fenced code with the language hint."""
        html = '<pre><code class="language-python">def hello():\n    return "world"\n</code></pre>'

        markdown = self.converter.convert(html)

        assert '```python\ndef hello():\n    return "world"\n```' in markdown

    def test_fenced_code_lang_prefix(self):
        markdown = self.converter.convert('<pre class="lang-js">let x = 1;</pre>')
        assert "```js\nlet x = 1;\n```" in markdown

    def test_code_containing_fence(self):
        """Test code that contains a triple backtick gets a longer fence."""
        markdown = self.converter.convert("<pre><code>```\ninner\n```</code></pre>")
        assert markdown.startswith("````\n")

    def test_code_whitespace_preserved(self):
        markdown = self.converter.convert("<pre><code>a  *b*  _c_\n\n\n  d</code></pre>")
        assert "a  *b*  _c_" in markdown
        assert "  d" in markdown

    def test_table(self):
        """Test tables become GFM pipe tables."""
        html = """
        <table>
            <tr><th>Name</th><th>Value</th></tr>
            <tr><td>alpha</td><td>1</td></tr>
            <tr><td>beta | gamma</td><td>2</td></tr>
        </table>
        """

        markdown = self.converter.convert(html)

        assert "| Name | Value |" in markdown
        assert "| --- | --- |" in markdown
        assert "| alpha | 1 |" in markdown
        assert "| beta \\| gamma | 2 |" in markdown

    def test_ragged_table_padded(self):
        html = "<table><tr><th>A</th><th>B</th></tr><tr><td>only</td></tr></table>"
        markdown = self.converter.convert(html)
        assert "| only |  |" in markdown

    def test_nested_table_flattened(self):
        html = "<table><tr><td>outer<table><tr><td>inner</td></tr></table></td></tr></table>"
        markdown = self.converter.convert(html)
        assert "outer inner" in markdown
        assert markdown.count("| --- |") == 1

    def test_removes_scripts_and_styles(self):
        html = "<p>Keep</p><script>alert(1)</script><style>p{}</style>"
        markdown = self.converter.convert(html)
        assert "Keep" in markdown
        assert "alert" not in markdown
        assert "p{}" not in markdown

    def test_drops_empty_links(self):
        markdown = self.converter.convert('<p>Text<a href="https://example.com"></a></p>')
        assert "https://example.com" not in markdown

    def test_unwraps_links_without_href(self):
        markdown = self.converter.convert("<p><a>anchor text</a></p>")
        assert "anchor text" in markdown
        assert "[" not in markdown

    def test_drops_tracking_pixels(self):
        html = (
            '<p>Hi</p><img src="https://t.example.com/p.png" width="1" height="1">'
            '<img src="/spacer.gif" alt="spacer">'
        )
        markdown = self.converter.convert(html)
        assert "p.png" not in markdown
        assert "spacer" not in markdown

    def test_keeps_images(self):
        markdown = self.converter.convert('<img src="https://example.com/a.png" alt="Chart">')
        assert "![Chart](https://example.com/a.png)" in markdown

    def test_output_normalized(self):
        """Test blank runs collapse and output ends with one newline."""
        markdown = self.converter.convert("<p>One</p><br><br><br><br><p>Two</p>")

        assert "\n\n\n" not in markdown
        assert markdown.endswith("Two\n")
        assert not markdown.endswith("\n\n")

    def test_empty_input(self):
        assert self.converter.convert("") == "\n"
