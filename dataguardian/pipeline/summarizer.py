"""
Privacy summary synthesis.

Asks the LLM agent for a five-field summary of a site's trackers
and falls back to the deterministic rule-based summary whenever the
agent is unconfigured, fails, or returns text without a JSON object.
``PrivacySummarizer.summarize`` never raises.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from dataguardian.agents.prompts import privacy_summary as prompts
from dataguardian.analysis import classifier, privacy_summary
from dataguardian.models import summary as summary_models
from dataguardian.models import tracking
from dataguardian.utils import cache, errors, json_parsing, logger

log = logger.create_logger("Summarizer")

NOTE_UNAVAILABLE = "AI analysis unavailable - API key missing"
NOTE_UNPARSEABLE = "AI response could not be parsed - showing rule-based summary"

DEFAULT_CACHE_TTL_S = 24 * 60 * 60


class SummaryAgent(Protocol):
    """Text-generation collaborator."""

    @property
    def is_configured(self) -> bool: ...

    async def complete(self, prompt: str) -> str: ...


def cache_key(site_url: str, trackers: Sequence[str]) -> str:
    """Memoisation key: the URL plus the sorted tracker list."""
    return f"{site_url}_{','.join(sorted(trackers))}"


def parse_summary_text(text: str | None) -> dict[str, Any]:
    """Extract the first JSON object from an LLM response.

    Raises:
        SummaryParseError: No JSON object could be found.
    """
    parsed = json_parsing.extract_json_object(text)
    if parsed is None:
        raise errors.SummaryParseError("No JSON object found in AI response")
    return parsed


class PrivacySummarizer:
    """Produces (and memoises) ``AISummary`` payloads.

    Args:
        agent: LLM collaborator, or ``None`` when no backend exists.
        summary_cache: Shared TTL cache; one is created if omitted.
        clock: Time source for a created cache (tests pass a fake).
    """

    def __init__(
        self,
        agent: SummaryAgent | None,
        summary_cache: cache.TTLCache[summary_models.AISummary] | None = None,
        *,
        ttl_s: float = DEFAULT_CACHE_TTL_S,
        max_entries: int | None = 500,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._agent = agent
        if summary_cache is None:
            summary_cache = cache.TTLCache(ttl_s, max_entries=max_entries, clock=clock)
        self._cache = summary_cache

    @property
    def summary_cache(self) -> cache.TTLCache[summary_models.AISummary]:
        return self._cache

    def _fallback(
        self,
        trackers: Sequence[str],
        site_url: str,
        details: list[tracking.TrackerClassification],
        note: str,
        *,
        success: bool = False,
    ) -> summary_models.AISummary:
        fields = privacy_summary.validate_summary(privacy_summary.create_fallback_summary(trackers, site_url))
        return summary_models.AISummary(
            success=success,
            summary=privacy_summary.build_privacy_summary(fields),
            tracker_count=len(trackers),
            tracker_details=details,
            note=note,
        )

    async def summarize(self, trackers: Sequence[str], site_url: str) -> summary_models.AISummary:
        """Summarise the data practices implied by *trackers* on *site_url*."""
        trackers = list(trackers)
        key = cache_key(site_url, trackers)
        cached, hit = self._cache.get(key)
        if hit and cached is not None:
            log.debug("Summary cache hit", {"url": site_url})
            return cached.model_copy(deep=True)

        details = classifier.build_tracker_details(trackers)
        try:
            result, cacheable = await self._synthesize(trackers, site_url, details)
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.error("Summary synthesis failed", {"url": site_url, "error": message})
            return self._fallback(trackers, site_url, details, message)

        if cacheable:
            self._cache.set(key, result)
        return result.model_copy(deep=True)

    async def _synthesize(
        self,
        trackers: list[str],
        site_url: str,
        details: list[tracking.TrackerClassification],
    ) -> tuple[summary_models.AISummary, bool]:
        """Return the summary and whether it may be cached."""
        if self._agent is None or not self._agent.is_configured:
            log.warn("LLM not configured, using rule-based summary", {"url": site_url})
            return self._fallback(trackers, site_url, details, NOTE_UNAVAILABLE), True

        log.start_timer("ai-summary")
        try:
            text = await self._agent.complete(prompts.build_user_prompt(site_url, trackers))
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.error("AI summary request failed", {"url": site_url, "error": message})
            return self._fallback(trackers, site_url, details, f"AI analysis failed: {message}"), False
        finally:
            log.end_timer("ai-summary", "AI summary request finished")

        try:
            raw = parse_summary_text(text)
        except errors.SummaryParseError as exc:
            log.warn("Failed to parse AI response", {"error": str(exc), "preview": (text or "")[:200]})
            # A parse failure still counts as a successful summary.
            return self._fallback(trackers, site_url, details, NOTE_UNPARSEABLE, success=True), True

        fields = privacy_summary.validate_summary(raw)
        log.success("AI summary generated", {"url": site_url, "risks": len(fields.key_risks)})
        return (
            summary_models.AISummary(
                success=True,
                summary=privacy_summary.build_privacy_summary(fields),
                tracker_count=len(trackers),
                tracker_details=details,
            ),
            True,
        )
