"""
Site analysis orchestrator.

Serves a stored analysis while it is fresh and otherwise runs
crawler → summarizer → scorer and upserts the result.  Freshness
depends on the stored outcome: successful analyses live 48 hours,
failed ones 30 minutes so they are retried soon.

Concurrent requests for the same URL and policy text share one
in-flight analysis.
A storage outage never fails a request; the result is returned with
a warning instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

from dataguardian.analysis import scoring
from dataguardian.models import site, tracking
from dataguardian.pipeline import crawler, summarizer as summarizer_mod
from dataguardian.storage import site_store
from dataguardian.utils import errors, logger, settings as settings_mod

log = logger.create_logger("Analyzer")

SUCCESS_TTL = timedelta(hours=48)
FAILURE_TTL = timedelta(minutes=30)

DETECTION_FAILED = "Failed to analyze website trackers"

DetectFn = Callable[[str, tracking.DetectOptions | None], Awaitable[tracking.DetectionResult]]
InflightKey = tuple[str, str | None]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_stale(
    record: site.AnalysisResult,
    now: datetime,
    success_ttl: timedelta = SUCCESS_TTL,
    failure_ttl: timedelta = FAILURE_TTL,
) -> bool:
    """Whether *record* is too old to serve at *now*.

    The TTL depends on whether the stored AI summary succeeded.
    A record exactly at its TTL is stale.
    """
    ttl = success_ttl if record.summary_succeeded else failure_ttl
    return _as_utc(now) - _as_utc(record.last_analyzed) >= ttl


class SiteAnalyzer:
    """Entry point for ``analyze``.

    Args:
        store: Persisted site records.
        summarizer: Summary synthesizer (never raises).
        settings: TTLs, navigation timeout and detection deadline.
        detect: Tracker detection coroutine (tests inject fakes).
        now: Current-time source.
    """

    def __init__(
        self,
        store: site_store.SiteStore,
        summarizer: summarizer_mod.PrivacySummarizer,
        settings: settings_mod.AppSettings | None = None,
        *,
        detect: DetectFn = crawler.detect_trackers,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._store = store
        self._summarizer = summarizer
        self._settings = settings or settings_mod.AppSettings()
        self._detect = detect
        self._now = now
        self._inflight: dict[InflightKey, asyncio.Task[site.AnalyzeOutcome]] = {}

    @property
    def store(self) -> site_store.SiteStore:
        return self._store

    @property
    def success_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.success_ttl_s)

    @property
    def failure_ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.failure_ttl_s)

    def _find_existing(self, url: str) -> tuple[site.AnalysisResult | None, str | None]:
        """Look up *url*; a store failure becomes a warning, not an error."""
        if not self._store.is_available():
            return None, "Database issue: Database not connected"
        try:
            return self._store.find_by_url(url), None
        except Exception as exc:
            log.warn("Site lookup failed", {"url": url, "error": errors.get_error_message(exc)})
            return None, f"Database issue: {errors.get_error_message(exc)}"

    async def analyze(self, request: site.AnalysisRequest) -> site.AnalyzeOutcome:
        """Return a fresh or freshly cached analysis of ``request.url``."""
        url = request.url
        existing, warning = self._find_existing(url)

        if existing is not None and not request.force_refresh:
            if not is_stale(existing, self._now(), self.success_ttl, self.failure_ttl):
                log.info("Serving cached analysis", {"url": url, "grade": existing.grade})
                return site.AnalyzeOutcome(
                    success=True,
                    message="Site data retrieved from cache",
                    site=existing,
                    from_cache=True,
                )
            log.debug("Cached analysis is stale", {"url": url})

        # Joined callers must carry the same policy text.
        inflight_key = (url, request.policy_text)
        task = self._inflight.get(inflight_key)
        if task is None or task.done():
            task = asyncio.ensure_future(self._analyze_fresh(request, existing, warning))
            self._inflight[inflight_key] = task
            task.add_done_callback(lambda t, key=inflight_key: self._forget(key, t))
        else:
            log.info("Joining in-flight analysis", {"url": url})
        return await asyncio.shield(task)

    def _forget(self, key: InflightKey, task: asyncio.Task[site.AnalyzeOutcome]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _run_detection(self, url: str) -> tracking.DetectionResult:
        options = tracking.DetectOptions(
            timeout_ms=self._settings.navigation_timeout_ms,
            simulate_interactions=self._settings.simulate_interactions,
        )
        deadline = self._settings.detection_deadline_s
        try:
            return await asyncio.wait_for(self._detect(url, options), timeout=deadline)
        except asyncio.TimeoutError:
            return tracking.DetectionResult.failed(url, f"Tracker detection exceeded {deadline}s")
        except Exception as exc:
            return tracking.DetectionResult.failed(url, errors.get_error_message(exc))

    async def _analyze_fresh(
        self,
        request: site.AnalysisRequest,
        existing: site.AnalysisResult | None,
        warning: str | None,
    ) -> site.AnalyzeOutcome:
        url = request.url
        log.section(f"Analyzing {url}")
        log.start_timer(f"analyze:{url}")
        try:
            detection = await self._run_detection(url)
            if not detection.success:
                log.error("Tracker detection failed", {"url": url, "error": detection.error})
                log.end_timer(f"analyze:{url}", "Analysis aborted")
                return site.AnalyzeOutcome(success=False, error=DETECTION_FAILED, details=detection.error)

            trackers = detection.detected_trackers
            ai_summary = await self._summarizer.summarize(trackers, url)
            breakdown = scoring.calculate_privacy_score(url, request.policy_text, trackers, ai_summary)

            record = site.AnalysisResult(
                url=url,
                score=breakdown.total_score,
                grade=breakdown.grade,
                category=breakdown.category,
                trackers=trackers,
                policy_text=request.policy_text,
                ai_summary=ai_summary,
                last_analyzed=self._now(),
                analysis_count=existing.analysis_count + 1 if existing else 1,
            )
        except Exception as exc:
            log.error("Analysis failed", {"url": url, "error": errors.get_error_message(exc)})
            log.end_timer(f"analyze:{url}", "Analysis aborted")
            return site.AnalyzeOutcome(success=False, error=errors.get_error_message(exc))

        saved, store_warning = self._save(record, warning)
        log.end_timer(f"analyze:{url}", "Analysis complete")
        return site.AnalyzeOutcome(
            success=True,
            message="Site analyzed successfully",
            site=saved,
            warning=store_warning,
        )

    def _save(self, record: site.AnalysisResult, warning: str | None) -> tuple[site.AnalysisResult, str | None]:
        if warning is not None and not self._store.is_available():
            log.warn("Store unavailable, returning unsaved result", {"url": record.url})
            return record, warning
        try:
            return self._store.upsert_by_url(record.url, record), None
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.warn("Database operation failed", {"url": record.url, "error": message})
            return record, f"Database issue: {message}"
