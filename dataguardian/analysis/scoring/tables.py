"""Constant tables for the privacy score model.

The server-side score and the what-if recomputation share one
algorithm (:func:`dataguardian.analysis.scoring.calculator.score_with_table`)
and differ only in the table passed to it.
"""

from __future__ import annotations

import dataclasses

# Keywords scanned in the policy text (case-insensitive substring,
# each counted at most once).
POSITIVE_KEYWORDS: tuple[str, ...] = (
    "encrypted",
    "no data sharing",
    "gdpr",
    "privacy focused",
    "user control",
    "opt-out",
    "delete data",
    "minimal collection",
)

NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "sell data",
    "third party",
    "advertisers",
    "share data",
    "indefinitely",
    "partners",
    "affiliates",
    "marketing",
)

HIGH_RISK_COMPANIES: tuple[str, ...] = ("Meta", "Google", "Amazon")

# (minimum score, band), highest first.
CATEGORY_BANDS: tuple[tuple[int, str], ...] = (
    (80, "Excellent"),
    (65, "Good"),
    (50, "Moderate"),
    (35, "Poor"),
)
LOWEST_CATEGORY = "Very Poor"


@dataclasses.dataclass(frozen=True)
class ScoringTable:
    """Tunable constants for one deployment of the score model.

    Tier tables are ``(upper bound inclusive, points)`` pairs in
    ascending order; a count above every bound earns the matching
    ``*_floor`` value.  ``grades`` is ``(minimum score, letter)``
    pairs, highest first, with ``lowest_grade`` below the last.
    """

    name: str
    tracker_tiers: tuple[tuple[int, int], ...]
    tracker_floor: int
    https_bonus: int
    positive_keyword_points: int
    negative_keyword_points: int
    risk_tiers: tuple[tuple[int, int], ...]
    risk_floor: int
    high_risk_penalty: int
    high_risk_penalty_cap: int
    grades: tuple[tuple[int, str], ...]
    lowest_grade: str = "F"

    @property
    def max_tracker_points(self) -> int:
        return max(points for _, points in self.tracker_tiers)

    @property
    def max_risk_points(self) -> int:
        return max(points for _, points in self.risk_tiers)


SERVER_TABLE = ScoringTable(
    name="server",
    tracker_tiers=((0, 40), (2, 35), (5, 25), (10, 15), (15, 5)),
    tracker_floor=0,
    https_bonus=10,
    positive_keyword_points=4,
    negative_keyword_points=3,
    risk_tiers=((2, 15), (4, 10)),
    risk_floor=5,
    high_risk_penalty=3,
    high_risk_penalty_cap=15,
    grades=(
        (95, "A+"),
        (90, "A"),
        (85, "A-"),
        (80, "B+"),
        (75, "B"),
        (70, "B-"),
        (65, "C+"),
        (60, "C"),
        (55, "C-"),
        (50, "D+"),
        (45, "D"),
        (40, "D-"),
    ),
)

# More lenient weights and grade boundaries for client-side
# "what if these categories were unblocked" recomputation.
WHAT_IF_TABLE = ScoringTable(
    name="what-if",
    tracker_tiers=((0, 70), (2, 60), (5, 45), (10, 30), (15, 15)),
    tracker_floor=0,
    https_bonus=10,
    positive_keyword_points=3,
    negative_keyword_points=2,
    risk_tiers=((2, 12), (4, 8)),
    risk_floor=4,
    high_risk_penalty=2,
    high_risk_penalty_cap=10,
    grades=(
        (97, "A+"),
        (93, "A"),
        (90, "A-"),
        (87, "B+"),
        (83, "B"),
        (80, "B-"),
        (77, "C+"),
        (73, "C"),
        (70, "C-"),
        (65, "D+"),
        (60, "D"),
        (55, "D-"),
    ),
)
