"""
Tracker detection crawler.

Loads a page in an isolated browser session, reduces the observed
outbound requests to a sorted set of distinct tracker hostnames and
always releases the session, whatever happened on the way.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from dataguardian.analysis import tracker_patterns
from dataguardian.browser import interactions
from dataguardian.browser import session as session_mod
from dataguardian.models import browser, tracking
from dataguardian.utils import errors, logger, url as url_mod

log = logger.create_logger("Crawler")

# Extra wait after navigation (and interactions) for delayed beacons.
SETTLE_MS = 2000


class CrawlerSession(interactions.InteractiveSession, Protocol):
    """Browser capabilities used by :func:`detect_trackers`."""

    async def navigate(self, url: str, timeout_ms: int = 30_000) -> browser.NavigationResult: ...

    def drain_observations(self) -> list[tracking.RequestObservation]: ...


SessionFactory = Callable[[], AbstractAsyncContextManager[CrawlerSession]]
DetectFn = Callable[[str, tracking.DetectOptions | None], Awaitable[tracking.DetectionResult]]


class _TrackerCollector:
    """Accumulates tracker hostnames (and verbose records) from observations."""

    def __init__(self, main_hostname: str, options: tracking.DetectOptions) -> None:
        self._main_hostname = main_hostname
        self._options = options
        self.hostnames: set[str] = set()
        self.requests: list[tracking.TrackerRequest] = []

    def absorb(self, observations: Iterable[tracking.RequestObservation]) -> None:
        for obs in observations:
            if not tracker_patterns.is_tracker_request(
                obs.url, obs.hostname, self._main_hostname, self._options.include_first_party
            ):
                continue
            self.hostnames.add(obs.hostname)
            if self._options.verbose:
                self.requests.append(
                    tracking.TrackerRequest(
                        domain=obs.hostname, url=obs.url, resource_type=obs.resource_type, method=obs.method
                    )
                )


async def detect_trackers(
    url: str,
    options: tracking.DetectOptions | None = None,
    *,
    session_factory: SessionFactory = session_mod.BrowserSession,
) -> tracking.DetectionResult:
    """Detect third-party trackers loaded by *url*.

    A navigation timeout is not fatal: the trackers seen before it
    are returned with ``timed_out=True`` and the interaction and
    settle phases are skipped.  Any other navigation error yields a
    failed result.

    Raises:
        BrowserLaunchError: No browser session could be created.
    """
    options = options or tracking.DetectOptions()
    main_hostname = url_mod.extract_hostname(url)
    if not main_hostname:
        return tracking.DetectionResult.failed(url, f"Invalid URL: {url}")

    collector = _TrackerCollector(main_hostname, options)
    timed_out = False
    log.start_timer(f"detect:{url}")
    log.info("Detecting trackers", {"url": url, "timeoutMs": options.timeout_ms})

    try:
        async with session_factory() as session:
            nav = await session.navigate(url, options.timeout_ms)
            collector.absorb(session.drain_observations())

            if nav.timed_out:
                timed_out = True
                log.warn("Timeout reached, proceeding with detected trackers", {"url": url})
            elif not nav.success:
                log.error("Navigation failed", {"url": url, "error": nav.error_message})
                return tracking.DetectionResult.failed(url, nav.error_message or "Navigation failed")
            else:
                if options.simulate_interactions:
                    await interactions.simulate_user_behavior(session)
                await session.wait_for_timeout(SETTLE_MS)

            collector.absorb(session.drain_observations())
    except errors.BrowserLaunchError:
        raise
    except Exception as exc:
        log.error("Tracker detection failed", {"url": url, "error": errors.get_error_message(exc)})
        return tracking.DetectionResult.failed(url, errors.get_error_message(exc))

    trackers = sorted(collector.hostnames)
    log.end_timer(f"detect:{url}", "Tracker detection complete")
    log.success("Trackers detected", {"url": url, "count": len(trackers), "timedOut": timed_out})
    return tracking.DetectionResult(
        url=url,
        success=True,
        detected_trackers=trackers,
        tracker_count=len(trackers),
        timed_out=timed_out,
        requests=collector.requests if options.verbose else None,
    )


async def detect_trackers_for_urls(
    urls: Sequence[str],
    options: tracking.DetectOptions | None = None,
    *,
    delay_ms: int = 1000,
    detect: DetectFn = detect_trackers,
) -> list[tracking.DetectionResult]:
    """Detect trackers on each URL in turn, one result per URL.

    A failing URL (including a browser that cannot launch) becomes
    a failed record; the remaining URLs still run.  *delay_ms* is a
    politeness pause between consecutive URLs.
    """
    results: list[tracking.DetectionResult] = []
    log.section(f"Batch detection ({len(urls)} URLs)")
    for index, url in enumerate(urls):
        try:
            result = await detect(url, options)
        except Exception as exc:
            log.error("Batch entry failed", {"url": url, "error": errors.get_error_message(exc)})
            result = tracking.DetectionResult.failed(url, errors.get_error_message(exc))
        results.append(result)
        if index < len(urls) - 1 and delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)
    log.info("Batch detection complete", {"total": len(results), "failed": sum(1 for r in results if not r.success)})
    return results
