"""Pydantic models for request observation, tracker detection and classification."""

from __future__ import annotations

from typing import Literal

import pydantic

from dataguardian.utils import serialization

TrackerCategory = Literal[
    "Advertising",
    "Analytics",
    "Social",
    "Tag Manager",
    "CDN/Utility",
    "First-Party/Analytics",
    "Unknown",
]

TRACKER_CATEGORIES: tuple[str, ...] = (
    "Advertising",
    "Analytics",
    "Social",
    "Tag Manager",
    "CDN/Utility",
    "Unknown",
)


class RequestObservation(pydantic.BaseModel):
    """One outbound request seen by the browser session."""

    model_config = serialization.CAMEL_CONFIG

    url: str
    hostname: str
    resource_type: str
    method: str


class TrackerRequest(pydantic.BaseModel):
    """A request that was judged to be tracking (verbose detection only)."""

    model_config = serialization.CAMEL_CONFIG

    domain: str
    url: str
    resource_type: str
    method: str


class DetectOptions(pydantic.BaseModel):
    """Options for a single tracker detection run."""

    model_config = serialization.CAMEL_CONFIG

    timeout_ms: int = pydantic.Field(default=30_000, gt=0)
    simulate_interactions: bool = True
    include_first_party: bool = False
    verbose: bool = False


class DetectionResult(pydantic.BaseModel):
    """Outcome of crawling one URL.

    ``detected_trackers`` is sorted and free of duplicates.  When
    ``success`` is false the list is empty and ``error`` is set.
    """

    model_config = serialization.CAMEL_CONFIG

    url: str
    success: bool
    detected_trackers: list[str] = pydantic.Field(default_factory=list)
    tracker_count: int = 0
    timed_out: bool = False
    requests: list[TrackerRequest] | None = None
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> DetectionResult:
        """Return a failed detection with no trackers."""
        return cls(url=url, success=False, detected_trackers=[], tracker_count=0, error=error)


class TrackerClassification(pydantic.BaseModel):
    """Vendor attribution for one tracker hostname."""

    model_config = pydantic.ConfigDict(frozen=True)

    domain: str
    name: str
    category: TrackerCategory
    company: str


class BatchDetectRequest(pydantic.BaseModel):
    """Body of ``POST /detect``."""

    model_config = serialization.CAMEL_CONFIG

    urls: list[str] = pydantic.Field(min_length=1, max_length=20)
    options: DetectOptions = pydantic.Field(default_factory=DetectOptions)
