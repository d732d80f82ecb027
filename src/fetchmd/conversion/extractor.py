"""Article extraction from HTML pages."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Elements that typically contain the article
CONTENT_SELECTORS = [
    "article",
    "main",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    ".main-content",
    ".documentation",
    ".docs-content",
    "#content",
    "#main-content",
    "#documentation",
]

# Boilerplate removed from the article
REMOVE_SELECTORS = [
    "nav",
    "header",
    "footer",
    "aside",
    "form",
    ".nav",
    ".navbar",
    ".sidebar",
    ".footer",
    ".header",
    ".menu",
    ".toc",
    ".table-of-contents",
    ".advertisement",
    ".ads",
    ".ad",
    ".ad-banner",
    '[class*="ad-banner"]',
    ".social-share",
    ".share-buttons",
    ".comments",
    ".related",
    ".related-posts",
    ".newsletter",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    '[aria-hidden="true"]',
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    "template",
]

KEEP_ATTRIBUTES = {"href", "src", "alt", "title", "class", "width", "height", "colspan", "rowspan"}

EXCERPT_LENGTH = 200
MIN_CONTENT_LENGTH = 100


class ExtractionError(Exception):
    """Raised when no readable content can be found in a document."""


@dataclass(frozen=True)
class ExtractResult:
    """
    Article extracted from a page.

    Attributes:
        title: Page title ("" if none found)
        content: Cleaned article HTML
        excerpt: Short description, None if none found
    """

    title: str
    content: str
    excerpt: Optional[str] = None


class ArticleExtractor:
    """
    Extracts the main article from HTML documents.

    Uses selector heuristics to find the content area, removes navigation,
    ads and other boilerplate, and resolves relative links when the source
    URL is known. Falls back to the whole body when no article is found.

    Example:
        extractor = ArticleExtractor()
        result = extractor.extract(html, "https://blog.example.com/post")
        print(result.title)
    """

    def __init__(
        self,
        content_selectors: Optional[list[str]] = None,
        remove_selectors: Optional[list[str]] = None,
    ):
        """
        Initialize the article extractor.

        Args:
            content_selectors: CSS selectors for main content (overrides defaults)
            remove_selectors: CSS selectors for elements to remove (extends defaults)
        """
        self._content_selectors = content_selectors or CONTENT_SELECTORS
        self._remove_selectors = list(REMOVE_SELECTORS)
        if remove_selectors:
            self._remove_selectors.extend(remove_selectors)

    def _find_main_content(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Find the main content element using selectors."""
        for selector in self._content_selectors:
            element = soup.select_one(selector)
            if element and len(element.get_text(strip=True)) > MIN_CONTENT_LENGTH:
                return element
        return None

    def _remove_unwanted(self, element: Tag) -> None:
        for selector in self._remove_selectors:
            for el in element.select(selector):
                el.decompose()

    def _clean_attributes(self, element: Tag) -> None:
        for tag in element.find_all(True):
            attrs_to_remove = [attr for attr in tag.attrs if attr not in KEEP_ATTRIBUTES]
            for attr in attrs_to_remove:
                del tag[attr]

    def _resolve_links(self, element: Tag, base_url: str) -> None:
        """Convert relative URLs to absolute URLs."""
        for tag in element.find_all("a", href=True):
            href = tag["href"]
            if href.startswith("#"):
                continue
            if not href.startswith(("http://", "https://", "//", "mailto:", "tel:")):
                tag["href"] = urljoin(base_url, href)

        for tag in element.find_all(src=True):
            src = tag["src"]
            if not src.startswith(("http://", "https://", "//", "data:")):
                tag["src"] = urljoin(base_url, src)

    def _meta_content(self, soup: BeautifulSoup, *keys: str) -> Optional[str]:
        for key in keys:
            tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
            if isinstance(tag, Tag):
                content = tag.get("content")
                if isinstance(content, str) and content.strip():
                    return content.strip()
        return None

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """
        Pick the page title.

        The first <h1> wins when it is part of the <title> text (which often
        carries a " | Site" suffix); otherwise og:title, <title>, then <h1>.
        """
        page_title = soup.title.get_text(strip=True) if soup.title else ""
        h1 = soup.find("h1")
        heading = h1.get_text(" ", strip=True) if isinstance(h1, Tag) else ""

        if heading and page_title and heading in page_title:
            return heading
        return self._meta_content(soup, "og:title") or page_title or heading

    def _extract_excerpt(self, soup: BeautifulSoup, content: Tag) -> Optional[str]:
        description = self._meta_content(soup, "description", "og:description")
        if description:
            return description

        for paragraph in content.find_all("p"):
            text = re.sub(r"\s+", " ", paragraph.get_text(" ", strip=True))
            if text:
                if len(text) > EXCERPT_LENGTH:
                    text = text[:EXCERPT_LENGTH].rsplit(" ", 1)[0] + "..."
                return text
        return None

    def _drop_title_heading(self, content: Tag, title: str) -> None:
        """Remove a leading <h1> that repeats the title."""
        h1 = content.find("h1")
        if isinstance(h1, Tag) and h1.get_text(" ", strip=True) == title:
            h1.decompose()

    def _clean_whitespace(self, text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = "\n".join(line.rstrip() for line in text.split("\n"))
        return text.strip()

    def extract(self, html: str, url: Optional[str] = None) -> ExtractResult:
        """
        Extract the article from an HTML document.

        Args:
            html: HTML document text
            url: Source URL for resolving relative links (optional)

        Returns:
            ExtractResult with title, cleaned content HTML and excerpt

        Raises:
            ExtractionError: If the document is empty or has no readable content
        """
        if not html or not html.strip():
            raise ExtractionError("Cannot extract content from empty HTML.")

        soup = BeautifulSoup(html, "html.parser")
        title = self._extract_title(soup)

        main_content = self._find_main_content(soup)
        if main_content is None:
            body = soup.find("body")
            if not isinstance(body, Tag) or not body.get_text(strip=True):
                raise ExtractionError("No extractable content found in HTML.")
            logger.warning("Article extraction failed, using full body")
            main_content = body

        # Work on a copy to keep the original tree intact
        content = BeautifulSoup(str(main_content), "html.parser")

        self._remove_unwanted(content)
        self._clean_attributes(content)
        if url:
            self._resolve_links(content, url)
        if title:
            self._drop_title_heading(content, title)

        return ExtractResult(
            title=title,
            content=self._clean_whitespace(str(content)),
            excerpt=self._extract_excerpt(soup, content),
        )
