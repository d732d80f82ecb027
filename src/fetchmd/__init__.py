"""
fetchmd - Convert web pages to clean, token-efficient Markdown.

Usage:
    from fetchmd import SafeFetcher, FetchBudget

    fetcher = SafeFetcher(budget=FetchBudget(timeout_ms=5000))
    html = await fetcher.fetch("https://example.com/article")
"""

__version__ = "1.0.0"

from .conversion import ArticleExtractor, ExtractionError, ExtractResult, HtmlToMarkdown
from .core.fetcher import FetchState, SafeFetcher, fetch_html
from .http import BoundedHttpClient, FetchError, HopResult
from .input import InputError, InputKind, InputSource, resolve_input
from .models.config import ByteSize, FetchBudget, FetchmdConfig, RenderConfig
from .pipeline import Pipeline, PipelineError, ResultRecord
from .render import PageRenderer, RenderError
from .security import SecurityError, UrlValidator, ValidatedUrl, validate_url
from .stats import Stats, compute_stats, format_stats

__all__ = [
    "__version__",
    # Core
    "SafeFetcher",
    "fetch_html",
    "FetchState",
    "BoundedHttpClient",
    "HopResult",
    # Security
    "UrlValidator",
    "ValidatedUrl",
    "validate_url",
    # Errors
    "SecurityError",
    "FetchError",
    "InputError",
    "ExtractionError",
    "RenderError",
    "PipelineError",
    # Config
    "ByteSize",
    "FetchBudget",
    "FetchmdConfig",
    "RenderConfig",
    # Pipeline
    "InputKind",
    "InputSource",
    "resolve_input",
    "Pipeline",
    "ResultRecord",
    "PageRenderer",
    # Conversion
    "ArticleExtractor",
    "ExtractResult",
    "HtmlToMarkdown",
    # Stats
    "Stats",
    "compute_stats",
    "format_stats",
]
