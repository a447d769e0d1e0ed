"""
Application settings for the analysis service.

Uses ``pydantic_settings.BaseSettings`` so every knob can be set
from the environment (or a ``.env`` file loaded at start-up) with
type coercion and validation.  LLM credentials live separately in
``dataguardian.agents.config``.
"""

from __future__ import annotations

import functools
from typing import Literal

import pydantic
import pydantic_settings

HOUR_SECONDS = 60 * 60


class AppSettings(pydantic_settings.BaseSettings):
    """Runtime configuration, bound to ``DATAGUARDIAN_*`` variables.

    Attributes:
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        environment: ``development`` or ``production``.
        store_dir: Directory for persisted site records.  Empty
            means an in-memory store (lost on restart).
        navigation_timeout_ms: Soft navigation bound; on expiry the
            trackers observed so far are kept.
        simulate_interactions: Scroll/consent/hover after load.
        detection_deadline_s: Hard deadline around one whole
            detection run.
        summary_cache_ttl_s: Lifetime of memoised AI summaries.
        summary_cache_max_entries: Cap on memoised AI summaries.
        success_ttl_s: Staleness TTL for records whose AI summary
            succeeded.
        failure_ttl_s: Staleness TTL for records whose AI summary
            failed or is missing.
        batch_delay_ms: Politeness delay between batch detections.
        log_level: Minimum level printed by the console logger.
    """

    model_config = pydantic_settings.SettingsConfigDict(env_prefix="DATAGUARDIAN_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000
    environment: Literal["development", "production"] = "development"
    store_dir: str = ""
    navigation_timeout_ms: int = pydantic.Field(default=30_000, gt=0)
    simulate_interactions: bool = True
    detection_deadline_s: float = pydantic.Field(default=120.0, gt=0)
    summary_cache_ttl_s: float = pydantic.Field(default=24 * HOUR_SECONDS, gt=0)
    summary_cache_max_entries: int = pydantic.Field(default=500, gt=0)
    success_ttl_s: float = pydantic.Field(default=48 * HOUR_SECONDS, gt=0)
    failure_ttl_s: float = pydantic.Field(default=30 * 60, gt=0)
    batch_delay_ms: int = pydantic.Field(default=1000, ge=0)
    log_level: Literal["debug", "info", "warn", "error"] = "info"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@functools.lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return the process-wide settings, read once from the environment."""
    return AppSettings()
