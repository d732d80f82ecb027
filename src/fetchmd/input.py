"""Resolve a URL, file or stdin input to HTML text."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Optional, Union

from .core.fetcher import SafeFetcher
from .render import PageRenderer

logger = logging.getLogger(__name__)

MAX_INPUT_BYTES = 5 * 1024 * 1024  # 5 MB
READ_CHUNK_SIZE = 64 * 1024


class InputError(Exception):
    """Raised when a local input cannot be used."""


class InputKind(str, Enum):
    """Where an input's HTML comes from."""

    URL = "url"
    FILE = "file"
    STDIN = "stdin"


@dataclass(frozen=True)
class InputSource:
    """One input to convert."""

    kind: InputKind
    value: Optional[str] = None

    @property
    def label(self) -> str:
        """Source name used in output and error messages."""
        if self.kind == InputKind.STDIN:
            return "stdin"
        return self.value or ""

    @classmethod
    def url(cls, value: str) -> InputSource:
        return cls(InputKind.URL, value)

    @classmethod
    def file(cls, value: Union[str, Path]) -> InputSource:
        return cls(InputKind.FILE, str(value))

    @classmethod
    def stdin(cls) -> InputSource:
        return cls(InputKind.STDIN)


def _read_stream(stream: IO, max_bytes: int) -> str:
    chunks: list[bytes] = []
    total = 0

    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        total += len(chunk)
        if total > max_bytes:
            raise InputError(f"Input exceeds {max_bytes} byte limit")
        chunks.append(chunk)

    return b"".join(chunks).decode("utf-8", errors="replace")


def _read_file(path: Path, max_bytes: int) -> str:
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise InputError(f"File exceeds {max_bytes} byte limit ({size} bytes)")
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        raise InputError(f"Cannot read file {path}: {err.strerror or err}") from err


async def resolve_input(
    source: InputSource,
    *,
    fetcher: SafeFetcher,
    renderer: Optional[PageRenderer] = None,
    stdin: Optional[IO] = None,
    max_bytes: int = MAX_INPUT_BYTES,
) -> str:
    """
    Load the HTML for one input.

    URLs are validated before anything else happens; with a renderer they
    are rendered in the browser, otherwise fetched over HTTPS.

    Args:
        source: Input to load
        fetcher: SafeFetcher used for validation and plain fetches
        renderer: Optional running PageRenderer for URL inputs
        stdin: Stream to read for stdin inputs (default: sys.stdin.buffer)
        max_bytes: Size ceiling for file and stdin inputs

    Returns:
        Non-empty HTML text

    Raises:
        SecurityError: If a URL is rejected
        FetchError: If fetching a URL fails
        RenderError: If rendering a URL fails
        InputError: If a file/stdin input is unusable or the HTML is empty
    """
    if source.kind == InputKind.URL:
        url = await fetcher.validator.validate(source.value or "")
        if renderer is not None:
            html = await renderer.render(url)
        else:
            html = await fetcher.fetch(url)

    elif source.kind == InputKind.FILE:
        html = await asyncio.to_thread(_read_file, Path(source.value or ""), max_bytes)

    else:
        stream = stdin if stdin is not None else sys.stdin.buffer
        html = await asyncio.to_thread(_read_stream, stream, max_bytes)

    if not html.strip():
        raise InputError("Input is empty. No HTML content to process.")

    logger.debug(f"Loaded {len(html)} chars from {source.label}")
    return html
