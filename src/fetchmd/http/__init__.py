"""Bounded HTTP fetching for fetchmd."""

from .client import BoundedHttpClient, FetchError
from .protocols import HopClient, HopResult
from .resolver import PinnedResolver

__all__ = [
    "BoundedHttpClient",
    "FetchError",
    "HopClient",
    "HopResult",
    "PinnedResolver",
]
