"""Privacy scoring package.

One additive score model parameterised by constant tables.  The
public API is :func:`calculate_privacy_score` for the server score
and :func:`recalculate_score_and_grade` for what-if recomputation.
"""

from __future__ import annotations

from dataguardian.analysis.scoring.calculator import (
    calculate_privacy_score,
    category_for,
    generate_site_summary,
    grade_for,
    score_with_table,
)
from dataguardian.analysis.scoring.tables import SERVER_TABLE, WHAT_IF_TABLE, ScoringTable
from dataguardian.analysis.scoring.what_if import blocked_categories_from_settings, recalculate_score_and_grade

__all__ = [
    "SERVER_TABLE",
    "WHAT_IF_TABLE",
    "ScoringTable",
    "blocked_categories_from_settings",
    "calculate_privacy_score",
    "category_for",
    "generate_site_summary",
    "grade_for",
    "recalculate_score_and_grade",
    "score_with_table",
]
