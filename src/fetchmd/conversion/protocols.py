"""Protocol definitions for content conversion."""

from typing import Optional, Protocol

from .extractor import ExtractResult


class ContentExtractor(Protocol):
    """
    Protocol for extracting the article from HTML.

    Implementations should keep the article body while removing
    navigation, headers, footers, ads, etc.
    """

    def extract(self, html: str, url: Optional[str] = None) -> ExtractResult:
        """
        Extract the article from HTML.

        Args:
            html: HTML document text
            url: Source URL (for relative link resolution)

        Returns:
            ExtractResult with title, cleaned HTML content and excerpt
        """
        ...


class MarkdownConverter(Protocol):
    """Protocol for converting HTML to Markdown."""

    def convert(self, html: str, url: Optional[str] = None) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            url: Source URL (for resolving relative links)

        Returns:
            Markdown string
        """
        ...
