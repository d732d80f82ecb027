"""Headless browser rendering for JavaScript-heavy pages."""

from __future__ import annotations

import contextlib
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

from . import __version__
from .models.config import RenderConfig
from .security.url_validator import ValidatedUrl

logger = logging.getLogger(__name__)

# Check for Playwright availability
PLAYWRIGHT_AVAILABLE = False
try:
    from playwright.async_api import async_playwright

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    pass

if TYPE_CHECKING:
    from playwright.async_api import Browser, Playwright

CHROMIUM_ARGS = ["--no-sandbox", "--disable-gpu", "--disable-dev-shm-usage"]


class RenderError(Exception):
    """Raised when a page cannot be rendered."""


def _is_timeout(error: Exception) -> bool:
    return type(error).__name__ == "TimeoutError" or "timeout" in str(error).lower()


class PageRenderer:
    """
    Renders pages in headless Chromium and returns the resulting HTML.

    Only accepts ValidatedUrl, so every render goes through the same URL
    validation as a plain fetch before any network contact.

    Example:
        async with PageRenderer(RenderConfig(timeout_ms=20000)) as renderer:
            html = await renderer.render(validated_url)

    Requires: pip install fetchmd[js]
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        user_agent: str | None = None,
        browser: Browser | Any | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            config: Render timeout/wait settings
            user_agent: Custom user agent (default: fetchmd/<version>)
            browser: Already-launched browser to use instead of launching one
        """
        self._config = config or RenderConfig()
        self._user_agent = user_agent or f"fetchmd/{__version__}"
        self._browser = browser
        self._owns_browser = browser is None
        self._playwright: Playwright | None = None

    async def __aenter__(self) -> PageRenderer:
        """Launch Chromium unless a browser was supplied."""
        if self._browser is not None:
            return self

        if not PLAYWRIGHT_AVAILABLE:
            raise RenderError("--render requires Playwright.\nInstall it with: pip install fetchmd[js]")

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._config.headless,
            args=CHROMIUM_ARGS,
        )
        logger.info("Headless browser launched")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the browser if this renderer launched it."""
        if self._owns_browser:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def render(self, url: ValidatedUrl) -> str:
        """
        Render a page and return its HTML.

        On a navigation timeout, whatever content loaded so far is returned
        if it is non-empty.

        Args:
            url: URL approved by the validator

        Returns:
            Rendered HTML document

        Raises:
            RenderError: If the browser is not running or navigation fails
        """
        if self._browser is None:
            raise RenderError("Renderer not initialized. Use 'async with' context manager.")

        timeout_ms = self._config.timeout_ms
        page = await self._browser.new_page(user_agent=self._user_agent)
        try:
            try:
                await page.goto(url.href, wait_until=self._config.wait_until, timeout=timeout_ms)
            except Exception as e:
                if _is_timeout(e):
                    partial = await page.content()
                    if partial and partial.strip():
                        logger.warning(f"Render timed out after {timeout_ms}ms, using partial content")
                        return partial
                raise RenderError(f"Failed to render {url.href}: {e}") from e

            html: str = await page.content()
            logger.debug(f"Rendered {url.href}: {len(html)} chars")
            return html
        finally:
            with contextlib.suppress(Exception):
                await page.close()
