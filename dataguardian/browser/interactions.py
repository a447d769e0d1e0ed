"""
Simulated user behaviour that surfaces lazily loaded trackers.

Scrolls, accepts a cookie banner when one is visible, hovers the
page centre and scrolls back.  Every step is independent: a failure
in one is logged and the next still runs.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Protocol

from dataguardian.models import browser
from dataguardian.utils import logger

log = logger.create_logger("Interactions")

# Tried in order; the first visible match is clicked and the rest ignored.
CONSENT_SELECTORS: tuple[str, ...] = (
    '[data-testid*="consent"]',
    '[class*="cookie"] button',
    '[class*="consent"] button',
    'button[class*="accept"]',
    "#cookie-accept",
    ".cookie-consent-accept",
    '[aria-label*="accept" i]',
)

_SCROLL_DOWN_JS = "() => window.scrollBy(0, window.innerHeight)"
_SCROLL_TOP_JS = "() => window.scrollTo(0, 0)"
_DISPATCH_HOVER_JS = """() => {
    document.body.dispatchEvent(
        new MouseEvent('mouseover', { view: window, bubbles: true, cancelable: true })
    );
}"""


class InteractiveSession(Protocol):
    """The page capabilities the simulation needs."""

    async def evaluate(self, script: str) -> Any: ...

    async def is_visible(self, selector: str) -> bool: ...

    async def click(self, selector: str, timeout_ms: int = 2000) -> None: ...

    def viewport_size(self) -> browser.ViewportSize | None: ...

    async def move_mouse(self, x: float, y: float) -> None: ...

    async def wait_for_timeout(self, ms: int) -> None: ...


@dataclasses.dataclass
class InteractionReport:
    """Which simulated steps completed."""

    scrolled: bool = False
    consent_selector: str | None = None
    hovered: bool = False
    scrolled_back: bool = False
    failures: list[str] = dataclasses.field(default_factory=list)


async def click_consent_button(session: InteractiveSession) -> str | None:
    """Click the first visible consent button; return its selector."""
    for selector in CONSENT_SELECTORS:
        try:
            if not await session.is_visible(selector):
                continue
            await session.click(selector)
        except Exception as exc:
            log.debug("Consent selector failed", {"selector": selector, "error": str(exc)})
            continue
        log.info("Clicked consent button", {"selector": selector})
        return selector
    return None


async def _hover_centre(session: InteractiveSession) -> bool:
    try:
        size = session.viewport_size()
        if size is None:
            raise RuntimeError("viewport size unavailable")
        await session.move_mouse(size.width / 2, size.height / 2)
        return True
    except Exception as exc:
        log.debug("Mouse move failed, dispatching mouseover instead", {"error": str(exc)})
    try:
        await session.evaluate(_DISPATCH_HOVER_JS)
        return True
    except Exception as exc:
        log.debug("Mouseover dispatch failed", {"error": str(exc)})
        return False


async def simulate_user_behavior(session: InteractiveSession) -> InteractionReport:
    """Run the scroll / consent / hover / scroll-back sequence."""
    report = InteractionReport()

    try:
        await session.evaluate(_SCROLL_DOWN_JS)
        report.scrolled = True
        await session.wait_for_timeout(1500)
    except Exception as exc:
        report.failures.append(f"scroll: {exc}")

    try:
        report.consent_selector = await click_consent_button(session)
        if report.consent_selector:
            await session.wait_for_timeout(2000)
    except Exception as exc:
        report.failures.append(f"consent: {exc}")

    try:
        report.hovered = await _hover_centre(session)
        if report.hovered:
            await session.wait_for_timeout(500)
        await session.wait_for_timeout(1000)
    except Exception as exc:
        report.failures.append(f"hover: {exc}")

    try:
        await session.evaluate(_SCROLL_TOP_JS)
        report.scrolled_back = True
        await session.wait_for_timeout(1000)
    except Exception as exc:
        report.failures.append(f"scroll-back: {exc}")

    if report.failures:
        log.warn("User simulation had failures", {"failures": report.failures})
    else:
        log.debug("User simulation complete", {"consent": report.consent_selector or "none"})
    return report
