"""Fetchmd configuration models."""

from .config import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_MS,
    ByteSize,
    FetchBudget,
    FetchmdConfig,
    RenderConfig,
)

__all__ = [
    "ByteSize",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_TIMEOUT_MS",
    "FetchBudget",
    "FetchmdConfig",
    "RenderConfig",
]
