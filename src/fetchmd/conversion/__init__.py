"""Content conversion for fetchmd (article extraction, HTML to Markdown)."""

from .extractor import ArticleExtractor, ExtractionError, ExtractResult
from .markdown import HtmlToMarkdown
from .protocols import ContentExtractor, MarkdownConverter

__all__ = [
    # Protocols
    "ContentExtractor",
    "MarkdownConverter",
    # Implementations
    "ArticleExtractor",
    "ExtractResult",
    "ExtractionError",
    "HtmlToMarkdown",
]
