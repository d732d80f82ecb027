"""Bounded single-hop HTTP client."""

from __future__ import annotations

import asyncio
import codecs
import logging
from urllib.parse import urljoin

import aiohttp

from .. import __version__
from ..models.config import FetchBudget
from ..security.url_validator import ValidatedUrl
from .protocols import HopResult

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """
    Transport, protocol or resource-limit failure for an already-validated URL.

    Attributes:
        message: Human-readable description
        status_code: HTTP status code for status failures, None otherwise
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BoundedHttpClient:
    """
    HTTP client that performs exactly one request per call.

    Features:
    - Redirects are surfaced as HopResult.location, never followed
    - One timeout covers connect, headers and body transfer
    - Content-Type must be HTML or XHTML before the body is read
    - Body is streamed with a running byte ceiling

    Example:
        async with aiohttp.ClientSession() as session:
            client = BoundedHttpClient(session)
            result = await client.fetch(validated_url, FetchBudget())
            if result.is_redirect:
                print(f"Redirect to {result.location}")
    """

    CHUNK_SIZE = 8192
    ACCEPT = "text/html,application/xhtml+xml"
    HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

    STATUS_MESSAGES = {
        401: "Authentication required",
        403: "Access denied",
        404: "Page not found",
        429: "Rate limited",
    }

    def __init__(
        self,
        session: aiohttp.ClientSession,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            session: Open aiohttp session (owned by the caller)
            user_agent: Custom User-Agent string (default: fetchmd/<version>)
        """
        self._session = session
        self._user_agent = user_agent or f"fetchmd/{__version__}"

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Accept": self.ACCEPT}

    async def fetch(self, url: ValidatedUrl, budget: FetchBudget) -> HopResult:
        """
        Perform one GET request with redirect-following disabled.

        Args:
            url: URL approved by the validator
            budget: Time and size limits

        Returns:
            HopResult with either a redirect location or the decoded document

        Raises:
            FetchError: On timeout, transport failure, HTTP error status,
                non-HTML content or an oversized body
        """
        try:
            return await asyncio.wait_for(self._request(url, budget), timeout=budget.timeout_seconds)
        except asyncio.TimeoutError as err:
            raise FetchError(f"Request timed out after {budget.timeout_ms}ms") from err
        except (aiohttp.ClientError, OSError) as err:
            raise FetchError(f"Fetch failed: {str(err) or type(err).__name__}") from err

    async def _request(self, url: ValidatedUrl, budget: FetchBudget) -> HopResult:
        logger.debug(f"GET {url.href}")
        async with self._session.get(
            url.href,
            headers=self.headers,
            allow_redirects=False,
            timeout=aiohttp.ClientTimeout(total=budget.timeout_seconds),
        ) as response:
            return await self._handle_response(url, response, budget)

    async def _handle_response(
        self,
        url: ValidatedUrl,
        response: aiohttp.ClientResponse,
        budget: FetchBudget,
    ) -> HopResult:
        status = response.status

        if 300 <= status < 400:
            location = response.headers.get("Location")
            if not location:
                raise FetchError(f"Redirect ({status}) with no Location header")
            target = urljoin(url.href, location)
            logger.debug(f"{url.href} redirected ({status}) to {target}")
            return HopResult(url=url.href, status_code=status, location=target)

        if not 200 <= status < 300:
            message = self.STATUS_MESSAGES.get(status, f"Server error ({status})")
            raise FetchError(message, status_code=status)

        content_type = response.headers.get("Content-Type", "")
        if not self._is_html(content_type):
            raise FetchError(f'Expected HTML content but got "{content_type}"')

        content = await self._read_bounded(response, budget.max_bytes)
        logger.debug(f"Fetched {url.href}: {len(content)} bytes")
        return HopResult(
            url=url.href,
            status_code=status,
            text=self._decode_content(content, content_type),
        )

    def _is_html(self, content_type: str) -> bool:
        lowered = content_type.lower()
        return any(html_type in lowered for html_type in self.HTML_CONTENT_TYPES)

    async def _read_bounded(self, response: aiohttp.ClientResponse, max_bytes: int) -> bytes:
        """
        Stream the body, aborting as soon as it grows past max_bytes.

        Content-Length is not trusted; only bytes actually received count.
        """
        chunks: list[bytes] = []
        total = 0

        async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
            total += len(chunk)
            if total > max_bytes:
                response.close()
                raise FetchError(f"Response exceeds {max_bytes} byte limit ({total}+ bytes received)")
            chunks.append(chunk)

        return b"".join(chunks)

    def _decode_content(self, content: bytes, content_type: str) -> str:
        """
        Decode body bytes.

        Uses the Content-Type charset when it names a known codec,
        otherwise UTF-8 with replacement.
        """
        encoding = "utf-8"
        for part in content_type.split(";")[1:]:
            part = part.strip()
            if part.lower().startswith("charset="):
                declared = part.split("=", 1)[1].strip().strip("\"'")
                try:
                    encoding = codecs.lookup(declared).name
                except LookupError:
                    logger.debug(f"Unknown declared charset: {declared}")
                break

        return content.decode(encoding, errors="replace")
