"""Redirect-aware fetch orchestrator that re-validates every hop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import aiohttp

from ..http.client import BoundedHttpClient, FetchError
from ..http.protocols import HopClient
from ..http.resolver import PinnedResolver
from ..models.config import FetchBudget
from ..security.url_validator import Resolver, SecurityError, UrlValidator, ValidatedUrl

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    """States of one fetch call."""

    VALIDATING = "validating"
    FETCHING = "fetching"
    REDIRECTING = "redirecting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RedirectChain:
    """
    Mutable state of one fetch call.

    Created per call and discarded when the call returns or raises.

    Attributes:
        current: URL for the next (or last) hop
        hops: Number of redirects followed so far
        state: Current FetchState
    """

    current: ValidatedUrl | None = None
    hops: int = 0
    state: FetchState = FetchState.VALIDATING

    def transition(self, state: FetchState) -> None:
        logger.debug(f"{self.state.value} -> {state.value} (hop {self.hops})")
        self.state = state


class SafeFetcher:
    """
    Fetches HTML over HTTPS without ever contacting an unapproved address.

    Each call validates the starting URL, then performs at most
    max_redirects + 1 single hops. Redirect targets go back through the
    validator before the next hop, and the transport connects only to the
    addresses the validator approved.

    Example:
        fetcher = SafeFetcher(budget=FetchBudget(timeout_ms=5000))
        html = await fetcher.fetch("https://example.com/article")
    """

    def __init__(
        self,
        budget: FetchBudget | None = None,
        resolver: Resolver | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            budget: Time/size/redirect limits (default: FetchBudget())
            resolver: Async hostname -> address function used for validation
            user_agent: Custom User-Agent string
        """
        self.budget = budget or FetchBudget()
        self._validator = UrlValidator(resolver=resolver)
        self._user_agent = user_agent

    @property
    def validator(self) -> UrlValidator:
        return self._validator

    async def fetch(self, url: str | ValidatedUrl) -> str:
        """
        Fetch a URL, following redirects hop by hop.

        Args:
            url: Candidate URL string, or a URL already validated by the caller

        Returns:
            Decoded HTML document

        Raises:
            SecurityError: If the URL or any redirect target is rejected
            FetchError: On transport/HTTP failures or too many redirects
        """
        chain = RedirectChain()
        pins = PinnedResolver()
        connector = aiohttp.TCPConnector(resolver=pins, use_dns_cache=False)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                client = BoundedHttpClient(session, user_agent=self._user_agent)
                return await self._run(chain, client, pins, url)
        except (SecurityError, FetchError) as e:
            chain.transition(FetchState.FAILED)
            logger.debug(f"Fetch failed after {chain.hops} redirect(s): {e}")
            raise

    async def _run(
        self,
        chain: RedirectChain,
        client: HopClient,
        pins: PinnedResolver,
        url: str | ValidatedUrl,
    ) -> str:
        if isinstance(url, ValidatedUrl):
            chain.current = url
            self._pin(pins, url)
        else:
            chain.current = await self._validate(chain, pins, url)

        while True:
            chain.transition(FetchState.FETCHING)
            result = await client.fetch(chain.current, self.budget)

            if not result.is_redirect:
                chain.transition(FetchState.DONE)
                return result.text or ""

            chain.transition(FetchState.REDIRECTING)
            chain.current = await self._validate(chain, pins, result.location)  # type: ignore[arg-type]
            chain.hops += 1

            if chain.hops > self.budget.max_redirects:
                raise FetchError(f"Too many redirects (>{self.budget.max_redirects})")

    async def _validate(self, chain: RedirectChain, pins: PinnedResolver, candidate: str) -> ValidatedUrl:
        chain.transition(FetchState.VALIDATING)
        validated = await self._validator.validate(candidate)
        self._pin(pins, validated)
        return validated

    def _pin(self, pins: PinnedResolver, url: ValidatedUrl) -> None:
        # aiohttp connects to IP literals without consulting the resolver
        if url.is_ip_literal:
            return
        pins.pin(url.hostname, url.address)  # type: ignore[arg-type]


async def fetch_html(
    url: str | ValidatedUrl,
    budget: FetchBudget | None = None,
    resolver: Resolver | None = None,
) -> str:
    """Fetch a URL with a one-off SafeFetcher."""
    return await SafeFetcher(budget=budget, resolver=resolver).fetch(url)
