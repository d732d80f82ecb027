"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from typing import Optional

import html2text
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

TRACKING_IMAGE_MARKERS = ("spacer.gif", "pixel.gif")

# Blocks rendered outside html2text are swapped for these markers and back
PLACEHOLDER = "FETCHMDBLOCK{index}END"


class HtmlToMarkdown:
    """
    Converts HTML content to compact Markdown.

    Uses html2text for inline and block formatting. Code blocks and tables
    are rendered separately so fenced code keeps its language hint and
    tables come out as GFM pipe tables.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert(html_string, "https://docs.example.com/page")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        ignore_images: bool = False,
        unicode_snob: bool = True,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            ignore_images: Skip image conversion
            unicode_snob: Use Unicode chars where possible
        """
        self._body_width = body_width
        self._inline_links = inline_links
        self._ignore_images = ignore_images
        self._unicode_snob = unicode_snob

    def _make_converter(self, url: Optional[str]) -> html2text.HTML2Text:
        converter = html2text.HTML2Text(baseurl=url or "")
        converter.body_width = self._body_width
        converter.inline_links = self._inline_links
        converter.wrap_links = False
        converter.protect_links = False
        converter.ignore_images = self._ignore_images
        converter.unicode_snob = self._unicode_snob
        converter.escape_snob = False
        converter.mark_code = False
        converter.ul_item_mark = "-"
        converter.emphasis_mark = "*"
        converter.strong_mark = "**"
        converter.default_image_alt = ""
        converter.single_line_break = False
        return converter

    def _strip_noise(self, soup: BeautifulSoup) -> None:
        """Drop empty links and tracking pixels."""
        for link in soup.find_all("a"):
            if not link.get_text(strip=True):
                link.decompose()
            elif not link.get("href"):
                link.unwrap()

        for img in soup.find_all("img"):
            src = img.get("src") or ""
            if img.get("width") == "1" and img.get("height") == "1":
                img.decompose()
            elif any(marker in src for marker in TRACKING_IMAGE_MARKERS):
                img.decompose()

    def _fenced_code(self, pre: Tag) -> str:
        code = pre.find("code")
        source = code if isinstance(code, Tag) else pre

        classes = source.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        lang_match = re.search(r"(?:language-|lang-)(\S+)", " ".join(classes))
        lang = lang_match.group(1) if lang_match else ""

        text = source.get_text().rstrip("\n")
        fence = "````" if "```" in text else "```"
        return f"{fence}{lang}\n{text}\n{fence}"

    def _table(self, table: Tag) -> str:
        rows: list[list[str]] = []
        for tr in table.find_all("tr"):
            if tr.find_parent("table") is not table:
                continue
            cells = [
                re.sub(r"\s+", " ", cell.get_text(" ", strip=True)).replace("|", "\\|")
                for cell in tr.find_all(["th", "td"], recursive=False)
            ]
            if cells:
                rows.append(cells)

        if not rows:
            return ""

        width = max(len(row) for row in rows)
        rows = [row + [""] * (width - len(row)) for row in rows]

        lines = ["| " + " | ".join(rows[0]) + " |", "| " + " | ".join(["---"] * width) + " |"]
        lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
        return "\n".join(lines)

    def _extract_blocks(self, soup: BeautifulSoup) -> list[str]:
        """Replace <pre> and <table> elements with placeholders."""
        blocks: list[str] = []

        # Outermost tables only; nested tables and code flatten into cell text
        for table in soup.find_all("table"):
            if table.find_parent("table") is not None:
                continue
            blocks.append(self._table(table))
            table.replace_with(self._marker(soup, len(blocks) - 1))

        for pre in soup.find_all("pre"):
            if pre.find_parent("pre") is not None:
                continue
            blocks.append(self._fenced_code(pre))
            pre.replace_with(self._marker(soup, len(blocks) - 1))

        return blocks

    def _marker(self, soup: BeautifulSoup, index: int) -> Tag:
        marker = soup.new_tag("p")
        marker.string = PLACEHOLDER.format(index=index)
        return marker

    def _restore_blocks(self, markdown: str, blocks: list[str]) -> str:
        for index, block in enumerate(blocks):
            markdown = markdown.replace(PLACEHOLDER.format(index=index), f"\n{block}\n")
        return markdown

    def _clean_output(self, markdown: str) -> str:
        """Trim trailing whitespace, collapse blank runs, end with one newline."""
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)
        return markdown.strip() + "\n"

    def convert(self, html: str, url: Optional[str] = None) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            url: Source URL for resolving relative links (optional)

        Returns:
            Markdown string ending with a single newline
        """
        soup = BeautifulSoup(html, "html.parser")
        for element in soup.find_all(["script", "style", "noscript", "template"]):
            element.decompose()

        self._strip_noise(soup)
        blocks = self._extract_blocks(soup)

        try:
            markdown = self._make_converter(url).handle(str(soup))
        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            # Fall back to plain text so the block markers still land somewhere
            markdown = soup.get_text(separator="\n")

        return self._clean_output(self._restore_blocks(markdown, blocks))
