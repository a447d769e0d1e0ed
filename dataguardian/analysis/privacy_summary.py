"""
Deterministic privacy-summary helpers.

- ``create_fallback_summary`` synthesises a summary from tracker
  hostnames alone, for when the AI path is unavailable or unusable.
- ``validate_summary`` clamps any (parsed or fallback) payload to the
  documented list caps and replaces malformed fields with sentinels.
- ``build_privacy_summary`` adds the popup/full projections.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

from dataguardian.analysis import truncation
from dataguardian.models import summary as summary_models
from dataguardian.utils import url as url_mod

NOT_AVAILABLE = "Information not available"
RISKS_NOT_AVAILABLE = "Privacy risks could not be determined"

# Maximum items kept per field after validation.
MAX_COLLECT = 8
MAX_SHARE_WITH = 10
MAX_RISKS = 6
MAX_BREAKDOWN = 5


@dataclasses.dataclass(frozen=True)
class VariantLimits:
    """Word budget and per-field item caps for one summary projection."""

    target_words: int
    max_collect: int
    max_share_with: int
    max_risks: int
    max_breakdown: int


POPUP_VARIANT = VariantLimits(target_words=40, max_collect=3, max_share_with=3, max_risks=3, max_breakdown=3)
FULL_VARIANT = VariantLimits(target_words=70, max_collect=5, max_share_with=6, max_risks=4, max_breakdown=4)


# ============================================================================
# Fallback synthesis
# ============================================================================


def _site_label(site_url: str) -> str:
    return url_mod.extract_hostname(site_url) or site_url or "this site"


def _describe_tracker(tracker: str) -> str:
    if "google" in tracker:
        return f"{tracker}: Google's tracking service for analytics and advertising"
    if "facebook" in tracker:
        return f"{tracker}: Meta's social media and advertising tracker"
    if "doubleclick" in tracker:
        return f"{tracker}: Google's advertising network for targeted ads"
    return f"{tracker}: Third-party tracking and analytics service"


def create_fallback_summary(trackers: Sequence[str], site_url: str) -> summary_models.SummaryFields:
    """Build a rule-based summary from tracker counts and vendor names.

    Pure and deterministic: the same trackers and URL always give
    the same summary, and no input makes it raise.
    """
    hosts = [str(t).lower() for t in trackers]
    count = len(hosts)

    companies: list[str] = []
    if any("google" in t or "doubleclick" in t for t in hosts):
        companies.append("Google")
    if any("facebook" in t for t in hosts):
        companies.append("Meta/Facebook")
    if any("ads" in t or "doubleclick" in t or "adnxs" in t for t in hosts):
        companies.append("Advertising Networks")
    if any("analytics" in t or "mixpanel" in t or "hotjar" in t for t in hosts):
        companies.append("Analytics Providers")

    collect = [
        "Browsing behavior and page views",
        "Device and browser information",
        "IP address and location data",
    ]
    if count > 5:
        collect.append("User interactions and clicks")
    if count > 10:
        collect.append("Cross-site tracking data")

    if count:
        risks = [f"Your browsing on {_site_label(site_url)} may be tracked across other websites"]
    else:
        risks = [f"No third-party trackers were observed on {_site_label(site_url)}"]
    if count > 5:
        risks.append("Detailed behavioral profiling for advertising")
    if count > 10:
        risks.append("Extensive data sharing with multiple partners")

    return summary_models.SummaryFields(
        what_they_collect=collect,
        who_they_share_with=companies or ["Third-party partners"],
        how_long_they_keep="Up to 2 years or indefinitely" if count > 8 else "Varies by service",
        key_risks=risks,
        tracker_breakdown=[_describe_tracker(t) for t in hosts[:4]],
    )


# ============================================================================
# Validation
# ============================================================================


def _string_list(value: Any, cap: int, sentinel: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(sentinel)
    return [str(item) for item in value if item is not None][:cap]


def validate_summary(raw: Mapping[str, Any] | summary_models.SummaryFields | Any) -> summary_models.SummaryFields:
    """Clamp a summary payload to the documented shape.

    Accepts a raw mapping (camelCase keys, as produced by the LLM)
    or an existing ``SummaryFields``.  Lists are cut to their caps,
    list entries are coerced to strings, and non-list / non-string
    fields are replaced by fixed sentinels.
    """
    if isinstance(raw, summary_models.SummaryFields):
        data: Mapping[str, Any] = raw.model_dump(by_alias=True)
    elif isinstance(raw, Mapping):
        data = raw
    else:
        data = {}

    retention = data.get("howLongTheyKeep")
    return summary_models.SummaryFields(
        what_they_collect=_string_list(data.get("whatTheyCollect"), MAX_COLLECT, [NOT_AVAILABLE]),
        who_they_share_with=_string_list(data.get("whoTheyShareWith"), MAX_SHARE_WITH, [NOT_AVAILABLE]),
        how_long_they_keep=retention if isinstance(retention, str) else NOT_AVAILABLE,
        key_risks=_string_list(data.get("keyRisks"), MAX_RISKS, [RISKS_NOT_AVAILABLE]),
        tracker_breakdown=_string_list(data.get("trackerBreakdown"), MAX_BREAKDOWN, []),
    )


# ============================================================================
# Popup / full projections
# ============================================================================


def project(fields: summary_models.SummaryFields, limits: VariantLimits) -> summary_models.SummaryFields:
    """Derive one length-capped projection of *fields*."""
    words = limits.target_words
    return summary_models.SummaryFields(
        what_they_collect=truncation.limit_items(fields.what_they_collect, words, limits.max_collect),
        who_they_share_with=truncation.limit_items(fields.who_they_share_with, words, limits.max_share_with),
        how_long_they_keep=truncation.sentence_aware_truncate(fields.how_long_they_keep, words),
        key_risks=truncation.limit_items(fields.key_risks, words, limits.max_risks),
        tracker_breakdown=truncation.limit_items(fields.tracker_breakdown, words, limits.max_breakdown),
    )


def build_privacy_summary(fields: summary_models.SummaryFields) -> summary_models.PrivacySummary:
    """Attach popup and full projections to validated *fields*."""
    return summary_models.PrivacySummary(
        **fields.model_dump(),
        popup_summary=project(fields, POPUP_VARIANT),
        full_summary=project(fields, FULL_VARIANT),
    )
