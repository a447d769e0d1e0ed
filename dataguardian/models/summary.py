"""Pydantic models for AI (or fallback) privacy summaries."""

from __future__ import annotations

import pydantic

from dataguardian.models import tracking
from dataguardian.utils import serialization


class SummaryFields(pydantic.BaseModel):
    """The five structured fields of a privacy summary."""

    model_config = serialization.CAMEL_CONFIG

    what_they_collect: list[str] = pydantic.Field(default_factory=list)
    who_they_share_with: list[str] = pydantic.Field(default_factory=list)
    how_long_they_keep: str = ""
    key_risks: list[str] = pydantic.Field(default_factory=list)
    tracker_breakdown: list[str] = pydantic.Field(default_factory=list)


class PrivacySummary(SummaryFields):
    """Validated summary plus its two length-capped projections.

    ``popup_summary`` and ``full_summary`` are always derived from
    the fields above, never authored separately.
    """

    popup_summary: SummaryFields | None = None
    full_summary: SummaryFields | None = None


class AISummary(pydantic.BaseModel):
    """Result of the summary synthesizer for one site."""

    model_config = serialization.CAMEL_CONFIG

    success: bool = False
    summary: PrivacySummary = pydantic.Field(default_factory=PrivacySummary)
    tracker_count: int = 0
    tracker_details: list[tracking.TrackerClassification] = pydantic.Field(default_factory=list)
    note: str | None = None
