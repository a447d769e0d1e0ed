"""Tests for the site analysis orchestrator.

Detection is injected as a coroutine, the AI agent is a
:class:`tests.fakes.FakeAgent` and time is a settable ``datetime``.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta

import pytest

from dataguardian.models import site, tracking
from dataguardian.pipeline import analyzer, summarizer
from dataguardian.storage import site_store
from dataguardian.utils import errors, settings as settings_mod
from tests import fakes

URL = "https://example.com"
TRACKERS = ["stats.g.doubleclick.net", "www.google-analytics.com"]

AI_RESPONSE = json.dumps(
    {
        "whatTheyCollect": ["Pages you visit"],
        "whoTheyShareWith": ["Google", "Meta"],
        "howLongTheyKeep": "Up to 26 months.",
        "keyRisks": ["Cross-site profiling"],
        "trackerBreakdown": [],
    }
)


class _Now:
    """Settable current time."""

    def __init__(self) -> None:
        self.value = fakes.NOW

    def __call__(self) -> datetime:
        return self.value


class _Detector:
    """Counts calls and returns a fixed detection result."""

    def __init__(self, trackers: list[str] | None = None, *, error: Exception | None = None, delay: float = 0) -> None:
        self.trackers = TRACKERS if trackers is None else trackers
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def __call__(self, url: str, options: tracking.DetectOptions | None = None) -> tracking.DetectionResult:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return tracking.DetectionResult(
            url=url, success=True, detected_trackers=self.trackers, tracker_count=len(self.trackers)
        )


class _BrokenStore(site_store.InMemorySiteStore):
    def __init__(self, *, available: bool = True, fail_find: bool = False, fail_upsert: bool = False) -> None:
        super().__init__()
        self.available = available
        self.fail_find = fail_find
        self.fail_upsert = fail_upsert
        self.upserts = 0

    def is_available(self) -> bool:
        return self.available

    def find_by_url(self, url: str) -> site.AnalysisResult | None:
        if self.fail_find:
            raise errors.StorageError("read timed out")
        return super().find_by_url(url)

    def upsert_by_url(self, url: str, record: site.AnalysisResult) -> site.AnalysisResult:
        self.upserts += 1
        if self.fail_upsert:
            raise errors.StorageError("disk full")
        return super().upsert_by_url(url, record)


def _make(
    store: site_store.SiteStore,
    detect: _Detector,
    now: _Now,
    *,
    agent: fakes.FakeAgent | None = None,
    settings: settings_mod.AppSettings | None = None,
) -> analyzer.SiteAnalyzer:
    summary_agent = agent or fakes.FakeAgent(AI_RESPONSE)
    return analyzer.SiteAnalyzer(
        store,
        summarizer.PrivacySummarizer(summary_agent, clock=fakes.FakeClock()),
        settings or settings_mod.AppSettings(),
        detect=detect,
        now=now,
    )


def _analyze(
    a: analyzer.SiteAnalyzer, *, force_refresh: bool = False, policy_text: str | None = None
) -> site.AnalyzeOutcome:
    request = site.AnalysisRequest(url=URL, force_refresh=force_refresh, policy_text=policy_text)
    return asyncio.run(a.analyze(request))


# ── Staleness ───────────────────────────────────────────────────


class TestIsStale:

    def test_success_ttl_boundary(self) -> None:
        record = fakes.make_record(ai_summary=fakes.make_ai_summary(success=True))
        assert not analyzer.is_stale(record, fakes.NOW + timedelta(hours=48) - timedelta(seconds=1))
        assert analyzer.is_stale(record, fakes.NOW + timedelta(hours=48))

    def test_failure_ttl_boundary(self) -> None:
        record = fakes.make_record(ai_summary=fakes.make_ai_summary(success=False))
        assert not analyzer.is_stale(record, fakes.NOW + timedelta(minutes=29, seconds=59))
        assert analyzer.is_stale(record, fakes.NOW + timedelta(minutes=30))

    def test_missing_summary_uses_failure_ttl(self) -> None:
        record = fakes.make_record()
        assert analyzer.is_stale(record, fakes.NOW + timedelta(minutes=31))

    def test_naive_timestamps_are_utc(self) -> None:
        record = fakes.make_record(last_analyzed=fakes.NOW.replace(tzinfo=None))
        assert not analyzer.is_stale(record, fakes.NOW + timedelta(minutes=5))


# ── analyze ─────────────────────────────────────────────────────


class TestAnalyze:

    def test_fresh_analysis_is_scored_and_saved(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect = _Detector()
        outcome = _analyze(_make(memory_store, detect, _Now()))

        assert outcome.success is True
        assert outcome.message == "Site analyzed successfully"
        assert outcome.from_cache is False
        assert outcome.warning is None
        assert outcome.site is not None
        # 2 trackers (35) + https (10) + one risk (15) - Google and Meta (6)
        assert (outcome.site.score, outcome.site.grade, outcome.site.category) == (54, "D+", "Moderate")
        assert outcome.site.trackers == TRACKERS
        assert outcome.site.analysis_count == 1
        assert outcome.site.ai_summary is not None and outcome.site.ai_summary.success
        assert memory_store.find_by_url(URL) == outcome.site

    def test_policy_text_is_scored_and_stored(self, memory_store: site_store.InMemorySiteStore) -> None:
        outcome = _analyze(_make(memory_store, _Detector(), _Now()), policy_text="GDPR and opt-out.")
        assert outcome.site is not None
        assert outcome.site.score == 54 + 8
        assert outcome.site.policy_text == "GDPR and opt-out."

    def test_cache_hit_within_ttl(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect, now = _Detector(), _Now()
        a = _make(memory_store, detect, now)
        first = _analyze(a)
        now.value += timedelta(hours=47)
        second = _analyze(a)

        assert detect.calls == [URL]
        assert second.from_cache is True
        assert second.message == "Site data retrieved from cache"
        assert second.site == first.site

    def test_stale_record_is_reanalysed(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect, now = _Detector(), _Now()
        a = _make(memory_store, detect, now)
        _analyze(a)
        now.value += timedelta(hours=48)
        outcome = _analyze(a)

        assert len(detect.calls) == 2
        assert outcome.from_cache is False
        assert outcome.site is not None
        assert outcome.site.analysis_count == 2
        assert outcome.site.last_analyzed == now.value

    def test_failed_summary_expires_sooner(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect, now = _Detector(), _Now()
        a = _make(memory_store, detect, now, agent=fakes.FakeAgent(configured=False))
        _analyze(a)
        now.value += timedelta(minutes=30)
        assert _analyze(a).from_cache is False
        assert len(detect.calls) == 2

    def test_force_refresh_bypasses_cache(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect = _Detector()
        a = _make(memory_store, detect, _Now())
        _analyze(a)
        outcome = _analyze(a, force_refresh=True)

        assert len(detect.calls) == 2
        assert outcome.from_cache is False
        assert outcome.site is not None and outcome.site.analysis_count == 2

    def test_detection_failure(self, memory_store: site_store.InMemorySiteStore) -> None:
        async def detect(url: str, options: tracking.DetectOptions | None = None) -> tracking.DetectionResult:
            return tracking.DetectionResult.failed(url, "net::ERR_CONNECTION_REFUSED")

        a = analyzer.SiteAnalyzer(memory_store, summarizer.PrivacySummarizer(None), detect=detect)
        outcome = _analyze(a)

        assert outcome.success is False
        assert outcome.error == analyzer.DETECTION_FAILED
        assert outcome.details == "net::ERR_CONNECTION_REFUSED"
        assert memory_store.list_all() == []

    def test_detection_exception(self, memory_store: site_store.InMemorySiteStore) -> None:
        outcome = _analyze(_make(memory_store, _Detector(error=errors.BrowserLaunchError("no chromium")), _Now()))
        assert outcome.success is False
        assert outcome.details == "no chromium"

    def test_detection_deadline(self, memory_store: site_store.InMemorySiteStore) -> None:
        settings = settings_mod.AppSettings(detection_deadline_s=0.01)
        outcome = _analyze(_make(memory_store, _Detector(delay=1), _Now(), settings=settings))
        assert outcome.success is False
        assert "exceeded" in (outcome.details or "")

    def test_ai_unavailable_end_to_end(self, memory_store: site_store.InMemorySiteStore) -> None:
        outcome = _analyze(_make(memory_store, _Detector(), _Now(), agent=fakes.FakeAgent(configured=False)))

        assert outcome.success is True
        assert outcome.site is not None
        ai_summary = outcome.site.ai_summary
        assert ai_summary is not None
        assert ai_summary.success is False
        assert ai_summary.note == summarizer.NOTE_UNAVAILABLE
        assert any("Google" in company for company in ai_summary.summary.who_they_share_with)
        # 2 trackers (35) + https (10), no risk points without a successful summary
        assert (outcome.site.score, outcome.site.grade) == (45, "D")
        assert memory_store.find_by_url(URL) == outcome.site

    def test_empty_tracker_list_still_succeeds(self, memory_store: site_store.InMemorySiteStore) -> None:
        outcome = _analyze(_make(memory_store, _Detector([]), _Now()))
        assert outcome.success is True
        assert outcome.site is not None and outcome.site.trackers == []


# ── Storage degradation ─────────────────────────────────────────


class TestStorageDegradation:

    def test_save_failure_becomes_warning(self) -> None:
        store = _BrokenStore(fail_upsert=True)
        outcome = _analyze(_make(store, _Detector(), _Now()))

        assert outcome.success is True
        assert outcome.warning == "Database issue: disk full"
        assert outcome.site is not None

    def test_unavailable_store_is_not_written(self) -> None:
        store = _BrokenStore(available=False)
        outcome = _analyze(_make(store, _Detector(), _Now()))

        assert outcome.success is True
        assert outcome.warning == "Database issue: Database not connected"
        assert store.upserts == 0

    def test_lookup_failure_still_analyses(self) -> None:
        store = _BrokenStore(fail_find=True)
        detect = _Detector()
        outcome = _analyze(_make(store, detect, _Now()))

        assert outcome.success is True
        assert detect.calls == [URL]
        assert outcome.warning is None
        assert store.upserts == 1


# ── Concurrency ─────────────────────────────────────────────────


class TestSingleflight:

    def test_concurrent_requests_share_one_analysis(self, memory_store: site_store.InMemorySiteStore) -> None:
        detect = _Detector(delay=0.01)
        a = _make(memory_store, detect, _Now())

        async def both() -> list[site.AnalyzeOutcome]:
            request = site.AnalysisRequest(url=URL)
            return list(await asyncio.gather(a.analyze(request), a.analyze(request)))

        first, second = asyncio.run(both())
        assert detect.calls == [URL]
        assert first.site == second.site
        assert memory_store.find_by_url(URL) is not None

    def test_different_policy_texts_are_scored_separately(
        self, memory_store: site_store.InMemorySiteStore
    ) -> None:
        detect = _Detector(delay=0.01)
        a = _make(memory_store, detect, _Now())
        policy = "We sell data to advertisers and partners for marketing."

        async def both() -> list[site.AnalyzeOutcome]:
            return list(
                await asyncio.gather(
                    a.analyze(site.AnalysisRequest(url=URL)),
                    a.analyze(site.AnalysisRequest(url=URL, policyText=policy)),
                )
            )

        first, second = asyncio.run(both())
        assert detect.calls == [URL, URL]
        assert first.site is not None and second.site is not None
        assert first.site.policy_text is None
        assert first.site.score == 54
        assert second.site.policy_text == policy
        # sell data, advertisers, partners, marketing
        assert second.site.score == 54 - 4 * 3
        assert a._inflight == {}

    @pytest.mark.parametrize("force_refresh", [False, True])
    def test_inflight_entry_is_released(self, memory_store: site_store.InMemorySiteStore, force_refresh: bool) -> None:
        detect = _Detector()
        a = _make(memory_store, detect, _Now())
        _analyze(a)
        _analyze(a, force_refresh=force_refresh)
        assert a._inflight == {}
