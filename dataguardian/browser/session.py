"""
Browser session for one tracker detection run.

Each ``BrowserSession`` owns an isolated headless Chromium
(playwright, browser, context, page) so concurrent detections never
share state.  Outbound requests are pushed onto an ``asyncio.Queue``
by the page's ``request`` hook and drained by the crawler; nothing
outlives ``close()``.

Use as an async context manager::

    async with BrowserSession() as session:
        await session.navigate(url, timeout_ms=30_000)
        observed = session.drain_observations()
"""

from __future__ import annotations

import asyncio
from typing import Any

from playwright import async_api

from dataguardian.models import browser, tracking
from dataguardian.utils import errors, logger, url as url_mod

log = logger.create_logger("BrowserSession")

# ============================================================================
# Constants
# ============================================================================

MAX_OBSERVED_REQUESTS = 5000

VIEWPORT = {"width": 1366, "height": 768}

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    " (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
]


class BrowserSession:
    """An isolated headless browser used by a single detection."""

    def __init__(self, *, headless: bool = True, max_requests: int = MAX_OBSERVED_REQUESTS) -> None:
        self._headless = headless
        self._max_requests = max_requests
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None

        self._observations: asyncio.Queue[tracking.RequestObservation] = asyncio.Queue()
        self._observed_count = 0

    async def __aenter__(self) -> BrowserSession:
        await self.launch()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def launch(self) -> None:
        """Start Chromium and open a page with the request hook attached.

        Raises:
            BrowserLaunchError: The browser could not be started.
        """
        log.debug("Launching browser", {"headless": self._headless})
        try:
            self._playwright = await async_api.async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless, args=LAUNCH_ARGS)
            self._context = await self._browser.new_context(
                viewport=VIEWPORT,  # type: ignore[arg-type]
                user_agent=USER_AGENT,
                locale="en-US",
                java_script_enabled=True,
            )
            self._page = await self._context.new_page()
        except Exception as exc:
            await self.close()
            raise errors.BrowserLaunchError(f"Failed to launch browser: {errors.get_error_message(exc)}") from exc

        # Registered before any navigation so no request is missed.
        self._page.on("request", self._on_request)
        log.debug("Browser launched", {"viewport": f"{VIEWPORT['width']}x{VIEWPORT['height']}"})

    async def close(self) -> None:
        """Close page, context, browser and playwright; safe to call twice."""
        if self._page:
            self._page.remove_listener("request", self._on_request)
            self._page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

        log.debug("Browser session closed", {"observed": self._observed_count})

    def _require_page(self) -> async_api.Page:
        if self._page is None:
            raise RuntimeError("No browser session active")
        return self._page

    # ==========================================================================
    # Request observation
    # ==========================================================================

    def _on_request(self, request: async_api.Request) -> None:
        """Queue one outbound request (runs on the event loop thread)."""
        hostname = url_mod.extract_hostname(request.url)
        if not hostname:
            return
        if self._observed_count >= self._max_requests:
            if self._observed_count == self._max_requests:
                log.debug("Request observation limit reached", {"limit": self._max_requests})
                self._observed_count += 1
            return
        self._observed_count += 1
        self._observations.put_nowait(
            tracking.RequestObservation(
                url=request.url,
                hostname=hostname,
                resource_type=request.resource_type,
                method=request.method,
            )
        )

    def drain_observations(self) -> list[tracking.RequestObservation]:
        """Return and remove every request queued so far."""
        drained: list[tracking.RequestObservation] = []
        while True:
            try:
                drained.append(self._observations.get_nowait())
            except asyncio.QueueEmpty:
                return drained

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate(self, url: str, timeout_ms: int = 30_000) -> browser.NavigationResult:
        """Navigate to *url* and wait for network quiescence.

        Never raises for navigation problems: a timeout yields
        ``timed_out=True`` and any other failure ``success=False``.
        """
        page = self._require_page()
        log.debug("Navigating", {"url": url, "timeoutMs": timeout_ms})
        try:
            response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except async_api.TimeoutError as exc:
            log.warn("Navigation timed out, keeping partial results", {"url": url, "timeoutMs": timeout_ms})
            return browser.NavigationResult(success=False, timed_out=True, error_message=str(exc))
        except Exception as exc:
            log.warn("Navigation error", {"url": url, "error": str(exc)})
            return browser.NavigationResult(success=False, error_message=str(exc))

        status_code = response.status if response else None
        if status_code and status_code >= 400:
            log.info("Page responded with an error status, analysing anyway", {"statusCode": status_code})
        return browser.NavigationResult(success=True, status_code=status_code)

    # ==========================================================================
    # Page interaction helpers
    # ==========================================================================

    async def evaluate(self, script: str) -> Any:
        """Evaluate *script* in the page context."""
        return await self._require_page().evaluate(script)

    async def is_visible(self, selector: str) -> bool:
        """Whether the first element matching *selector* is in the viewport."""
        locator = self._require_page().locator(selector).first
        if await locator.count() == 0:
            return False
        return await locator.is_visible()

    async def click(self, selector: str, timeout_ms: int = 2000) -> None:
        await self._require_page().locator(selector).first.click(timeout=timeout_ms)

    def viewport_size(self) -> browser.ViewportSize | None:
        size = self._require_page().viewport_size
        if not size:
            return None
        return browser.ViewportSize(width=size["width"], height=size["height"])

    async def move_mouse(self, x: float, y: float) -> None:
        await self._require_page().mouse.move(x, y)

    async def wait_for_timeout(self, ms: int) -> None:
        """Sleep for *ms* milliseconds.

        Uses ``asyncio.sleep`` rather than ``page.wait_for_timeout``,
        which Playwright reserves for debugging.
        """
        await asyncio.sleep(ms / 1000)
