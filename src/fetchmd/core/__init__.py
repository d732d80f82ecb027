"""Fetch orchestration for fetchmd."""

from .fetcher import FetchState, RedirectChain, SafeFetcher, fetch_html

__all__ = ["FetchState", "RedirectChain", "SafeFetcher", "fetch_html"]
