"""Agents package: the LLM-backed privacy summary agent built on MAF.

Shared infrastructure (chat client, retry, timing) lives in
``base.py`` and ``middleware.py``.  Singleton access goes through
``get_privacy_summary_agent()``, cached with ``functools.lru_cache``
so the agent is created once and reused.
"""

from __future__ import annotations

import functools

from dataguardian.agents import privacy_summary_agent
from dataguardian.utils import logger

log = logger.create_logger("Agents")


@functools.lru_cache(maxsize=1)
def get_privacy_summary_agent() -> privacy_summary_agent.PrivacySummaryAgent:
    """Get the singleton ``PrivacySummaryAgent``.

    The agent is returned even when no LLM backend is configured;
    callers check ``is_configured`` and fall back to rule-based
    summaries.
    """
    agent = privacy_summary_agent.PrivacySummaryAgent()
    if not agent.initialise():
        log.warn("PrivacySummaryAgent created without an LLM backend")
    return agent


__all__ = ["get_privacy_summary_agent"]
