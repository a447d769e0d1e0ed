"""What-if score recomputation.

Answers "what would this site score if the trackers in the
categories I block stopped loading?" using the lenient
:data:`WHAT_IF_TABLE` and the stored site record.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from dataguardian.analysis.scoring import calculator, tables
from dataguardian.models import scoring, site, tracking
from dataguardian.utils import logger

log = logger.create_logger("WhatIfScore")

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

_ALL_CATEGORIES: tuple[str, ...] = (*tracking.TRACKER_CATEGORIES, "First-Party/Analytics")


def setting_key(category: str) -> str:
    """Return the extension toggle key for *category*.

    ``"CDN/Utility"`` becomes ``"blockCDNUtilityTrackers"``.
    """
    return f"block{_NON_ALNUM.sub('', category)}Trackers"


def blocked_categories_from_settings(settings: Mapping[str, bool]) -> set[str]:
    """Translate extension toggle settings into blocked category names."""
    return {c for c in _ALL_CATEGORIES if settings.get(setting_key(c))}


def recalculate_score_and_grade(
    record: site.AnalysisResult,
    blocked_categories: Iterable[str],
) -> scoring.ScoreAndGrade:
    """Rescore *record* as if *blocked_categories* were blocked.

    Only trackers whose category is not blocked are counted.  A
    record without tracker details keeps its stored score and grade.
    """
    details = record.ai_summary.tracker_details if record.ai_summary else []
    if not details:
        return scoring.ScoreAndGrade(score=record.score, grade=record.grade)

    blocked = set(blocked_categories)
    unblocked = sum(1 for d in details if (d.category or "Unknown") not in blocked)
    breakdown = calculator.score_with_table(
        tables.WHAT_IF_TABLE,
        record.url,
        record.policy_text,
        unblocked,
        record.ai_summary,
    )
    log.debug(
        "What-if score",
        {"url": record.url, "blocked": sorted(blocked), "unblocked": unblocked, "score": breakdown.total_score},
    )
    return scoring.ScoreAndGrade(score=breakdown.total_score, grade=breakdown.grade)
