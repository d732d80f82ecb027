"""Protocol definitions for the single-hop HTTP client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..models.config import FetchBudget
from ..security.url_validator import ValidatedUrl


@dataclass(frozen=True)
class HopResult:
    """
    Immutable outcome of one request in a redirect chain.

    Exactly one of location/text is set.

    Attributes:
        url: URL that was requested
        status_code: HTTP status code
        location: Absolute redirect target (untrusted, not yet validated)
        text: Decoded document for a successful response
    """

    url: str
    status_code: int
    location: str | None = None
    text: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


class HopClient(Protocol):
    """
    Protocol for clients that perform exactly one request per call.

    Implementations must never follow redirects themselves.
    """

    async def fetch(self, url: ValidatedUrl, budget: FetchBudget) -> HopResult:
        """
        Fetch a validated URL once.

        Args:
            url: URL approved by the validator
            budget: Time and size limits for this hop

        Returns:
            HopResult carrying either a redirect location or the document

        Raises:
            FetchError on transport, protocol or size failures
        """
        ...
