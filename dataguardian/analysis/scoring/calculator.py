"""Privacy score calculator.

Sums four independent components (tracker count, transport
security, policy keywords, AI-summary signals) and clamps the total
to 0–100.  Every constant comes from a :class:`ScoringTable`, so the
server score and the what-if recomputation share this exact code.
"""

from __future__ import annotations

from collections.abc import Sequence

from dataguardian.analysis.scoring import tables
from dataguardian.models import scoring
from dataguardian.models import summary as summary_models
from dataguardian.utils import logger, url

log = logger.create_logger("PrivacyScore")


# ── Lookups ─────────────────────────────────────────────────


def _tier_points(count: int, tiers: tuple[tuple[int, int], ...], floor: int) -> int:
    for upper, points in tiers:
        if count <= upper:
            return points
    return floor


def grade_for(score: int, table: tables.ScoringTable = tables.SERVER_TABLE) -> str:
    """Map a 0–100 score to its letter grade in *table*."""
    for minimum, letter in table.grades:
        if score >= minimum:
            return letter
    return table.lowest_grade


def category_for(score: int) -> str:
    """Map a 0–100 score to its descriptive band."""
    for minimum, band in tables.CATEGORY_BANDS:
        if score >= minimum:
            return band
    return tables.LOWEST_CATEGORY


# ── Components ──────────────────────────────────────────────


def _tracker_component(count: int, table: tables.ScoringTable) -> scoring.CategoryScore:
    points = _tier_points(count, table.tracker_tiers, table.tracker_floor)
    issues = [f"{count} third-party trackers detected"] if count else []
    return scoring.CategoryScore(points=points, max_points=table.max_tracker_points, issues=issues)


def _transport_component(site_url: str, table: tables.ScoringTable) -> scoring.CategoryScore:
    if url.is_secure_url(site_url):
        return scoring.CategoryScore(points=table.https_bonus, max_points=table.https_bonus)
    return scoring.CategoryScore(points=0, max_points=table.https_bonus, issues=["Site is not served over HTTPS"])


def _policy_component(policy_text: str | None, table: tables.ScoringTable) -> scoring.CategoryScore:
    lower = (policy_text or "").lower()
    positives = [k for k in tables.POSITIVE_KEYWORDS if k in lower]
    negatives = [k for k in tables.NEGATIVE_KEYWORDS if k in lower]
    points = len(positives) * table.positive_keyword_points - len(negatives) * table.negative_keyword_points
    return scoring.CategoryScore(
        points=points,
        max_points=len(tables.POSITIVE_KEYWORDS) * table.positive_keyword_points,
        issues=[f"Policy mentions '{k}'" for k in negatives],
    )


def high_risk_companies(share_with: Sequence[str]) -> list[str]:
    """Distinct high-risk companies named anywhere in *share_with*."""
    found: list[str] = []
    for company in tables.HIGH_RISK_COMPANIES:
        needle = company.lower()
        if any(needle in str(entry).lower() for entry in share_with):
            found.append(company)
    return found


def _summary_component(
    ai_summary: summary_models.AISummary | None,
    table: tables.ScoringTable,
) -> scoring.CategoryScore:
    if ai_summary is None or not ai_summary.success:
        return scoring.CategoryScore(points=0, max_points=table.max_risk_points)

    risks = ai_summary.summary.key_risks
    points = _tier_points(len(risks), table.risk_tiers, table.risk_floor)
    companies = high_risk_companies(ai_summary.summary.who_they_share_with)
    penalty = min(len(companies) * table.high_risk_penalty, table.high_risk_penalty_cap)
    issues = [f"Data shared with {c}" for c in companies]
    return scoring.CategoryScore(points=points - penalty, max_points=table.max_risk_points, issues=issues)


# ── Public API ──────────────────────────────────────────────


def score_with_table(
    table: tables.ScoringTable,
    site_url: str,
    policy_text: str | None,
    tracker_count: int,
    ai_summary: summary_models.AISummary | None,
) -> scoring.ScoreBreakdown:
    """Run the score model with the constants in *table*.

    Components are summed in any order and only the final total is
    clamped, so intermediate negatives are allowed.

    Returns:
        A :class:`ScoreBreakdown` whose ``total_score`` is in 0–100.
    """
    components = {
        "trackers": _tracker_component(tracker_count, table),
        "transport": _transport_component(site_url, table),
        "policy": _policy_component(policy_text, table),
        "aiSummary": _summary_component(ai_summary, table),
    }
    raw_total = sum(c.points for c in components.values())
    total = max(0, min(100, raw_total))

    factors: list[str] = []
    for component in components.values():
        factors.extend(component.issues[:2])

    return scoring.ScoreBreakdown(
        total_score=total,
        raw_total=raw_total,
        grade=grade_for(total, table),
        category=category_for(total),
        categories=components,
        factors=factors,
    )


def calculate_privacy_score(
    site_url: str,
    policy_text: str | None,
    trackers: Sequence[str],
    ai_summary: summary_models.AISummary | None,
) -> scoring.ScoreBreakdown:
    """Calculate the server-side privacy score for one analysed site.

    Args:
        site_url: The analysed URL (its scheme decides the HTTPS bonus).
        policy_text: Raw privacy-policy text, if supplied.
        trackers: Distinct tracker hostnames detected on the page.
        ai_summary: Summary synthesizer output, if any.

    Returns:
        The score breakdown; ``total_score`` is the persisted score.
    """
    breakdown = score_with_table(tables.SERVER_TABLE, site_url, policy_text, len(trackers), ai_summary)
    log.info(
        "Privacy score calculated",
        {
            "score": breakdown.total_score,
            "raw": breakdown.raw_total,
            "grade": breakdown.grade,
            "trackers": len(trackers),
        },
    )
    return breakdown


def generate_site_summary(
    score: int,
    tracker_count: int,
    ai_summary: summary_models.AISummary | None = None,
) -> str:
    """Generate the user-facing one-paragraph verdict for a site."""
    if score >= 80:
        text = f"This site has excellent privacy practices with minimal tracking ({tracker_count} trackers)."
    elif score >= 65:
        text = f"This site has good privacy practices but uses some tracking ({tracker_count} trackers)."
    elif score >= 50:
        text = f"This site has moderate privacy practices with noticeable tracking ({tracker_count} trackers)."
    elif score >= 35:
        text = f"This site has poor privacy practices with significant tracking ({tracker_count} trackers)."
    else:
        text = f"This site has very poor privacy practices with extensive tracking ({tracker_count} trackers)."

    if ai_summary is not None and ai_summary.success:
        companies = ai_summary.summary.who_they_share_with
        if companies:
            shown = ", ".join(companies[:3])
            extra = f" and {len(companies) - 3} others" if len(companies) > 3 else ""
            text += f" Your data may be shared with {shown}{extra}."
    return text
