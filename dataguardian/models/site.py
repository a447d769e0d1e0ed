"""Pydantic models for analysis requests, persisted site records and outcomes."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from urllib import parse

import pydantic

from dataguardian.models import summary as summary_models
from dataguardian.utils import serialization

Grade = Literal["A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "D-", "F"]

ScoreCategory = Literal["Excellent", "Good", "Moderate", "Poor", "Very Poor"]


class AnalysisRequest(pydantic.BaseModel):
    """Body of ``POST /analyze``; never persisted."""

    model_config = serialization.CAMEL_CONFIG

    url: str
    policy_text: str | None = pydantic.Field(
        default=None,
        validation_alias=pydantic.AliasChoices("policyText", "policy_text", "simplifiedPolicy"),
    )
    force_refresh: bool = False

    @pydantic.field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = parse.urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class AnalysisResult(pydantic.BaseModel):
    """Persisted analysis of one site, keyed by ``url``."""

    model_config = serialization.CAMEL_CONFIG

    url: str
    score: int = pydantic.Field(ge=0, le=100)
    grade: Grade
    category: ScoreCategory
    trackers: list[str] = pydantic.Field(default_factory=list)
    policy_text: str | None = None
    ai_summary: summary_models.AISummary | None = None
    last_analyzed: datetime
    analysis_count: int = 1

    @pydantic.field_validator("trackers")
    @classmethod
    def _unique_trackers(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def summary_succeeded(self) -> bool:
        return bool(self.ai_summary and self.ai_summary.success)


class AnalyzeOutcome(pydantic.BaseModel):
    """What the orchestrator hands back to the HTTP layer."""

    success: bool
    message: str = ""
    site: AnalysisResult | None = None
    from_cache: bool = False
    warning: str | None = None
    error: str | None = None
    details: str | None = None


class WhatIfRequest(pydantic.BaseModel):
    """Body of ``POST /sites/what-if``.

    Categories may be named directly or through the extension's
    toggle keys (``{"blockAdvertisingTrackers": true}``).
    """

    model_config = serialization.CAMEL_CONFIG

    url: str
    blocked_categories: list[str] = pydantic.Field(default_factory=list)
    settings: dict[str, bool] = pydantic.Field(default_factory=dict)
