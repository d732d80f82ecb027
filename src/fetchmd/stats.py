"""Word, token and size statistics for converted Markdown."""

import math
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Stats:
    """Size of a Markdown document."""

    words: int
    tokens: int
    bytes: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    def __add__(self, other: "Stats") -> "Stats":
        return Stats(
            words=self.words + other.words,
            tokens=self.tokens + other.tokens,
            bytes=self.bytes + other.bytes,
        )


def compute_stats(text: str) -> Stats:
    """
    Measure a document.

    Tokens are estimated at four UTF-8 bytes per token.
    """
    size = len(text.encode("utf-8"))
    return Stats(words=len(text.split()), tokens=math.ceil(size / 4), bytes=size)


def format_stats(stats: Stats) -> str:
    """Format as '1,234 words | ~567 tokens | 2.2 KB markdown'."""
    if stats.bytes >= 1024 * 1024:
        size = f"{stats.bytes / (1024 * 1024):.1f} MB"
    else:
        size = f"{stats.bytes / 1024:.1f} KB"
    return f"{stats.words:,} words | ~{stats.tokens:,} tokens | {size} markdown"
