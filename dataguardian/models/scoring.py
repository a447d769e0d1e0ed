"""Pydantic models for privacy score breakdowns."""

from __future__ import annotations

import pydantic

from dataguardian.utils import serialization


class CategoryScore(pydantic.BaseModel):
    """Points contributed by one scoring component."""

    model_config = serialization.CAMEL_CONFIG

    points: int = 0
    max_points: int = 0
    issues: list[str] = pydantic.Field(default_factory=list)


class ScoreBreakdown(pydantic.BaseModel):
    """Detailed breakdown of how the score was calculated."""

    model_config = serialization.CAMEL_CONFIG

    total_score: int = 0
    raw_total: int = 0
    grade: str = "F"
    category: str = "Very Poor"
    categories: dict[str, CategoryScore] = pydantic.Field(default_factory=dict)
    factors: list[str] = pydantic.Field(default_factory=list)


class ScoreAndGrade(pydantic.BaseModel):
    """A recomputed score with its letter grade."""

    score: int
    grade: str
