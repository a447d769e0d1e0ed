"""Chat middleware for the privacy summary agent.

Timing and retry middleware following the Microsoft Agent
Framework ``ChatMiddleware`` pattern.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Awaitable, Callable

import agent_framework

from dataguardian.utils import logger

log = logger.create_logger("Agent-Middleware")

_NextHandler = Callable[[agent_framework.ChatContext], Awaitable[None]]


class TimingChatMiddleware(agent_framework.ChatMiddleware):
    """Logs how long each LLM round-trip takes."""

    def __init__(self, agent_name: str | None = None) -> None:
        self.agent_name = agent_name or "Unknown"
        super().__init__()

    async def process(self, context: agent_framework.ChatContext, next: _NextHandler) -> None:
        log.debug(f"Agent '{self.agent_name}' sending {len(context.messages)} message(s) to LLM")

        started = time.perf_counter()
        await next(context)
        elapsed = time.perf_counter() - started

        log.info(f"Agent '{self.agent_name}' completed in {elapsed:.2f}s")
        context.metadata["timing"] = {"duration_seconds": round(elapsed, 3), "agent_name": self.agent_name}


# ── Retry policy ───────────────────────────────────────────────────

_TRANSIENT_ERROR_NAMES = frozenset({"ConnectionError", "TimeoutError", "ConnectionResetError", "APIConnectionError"})


def is_retryable(error: BaseException) -> bool:
    """Whether *error* looks transient (429, 5xx, or a connection failure)."""
    message = str(error).lower()
    if "429" in message or "rate limit" in message:
        return True
    for attr in ("status", "status_code"):
        code = getattr(error, attr, None)
        if isinstance(code, int) and (code == 429 or 500 <= code < 600):
            return True
    return type(error).__name__ in _TRANSIENT_ERROR_NAMES


def retry_after_ms(error: BaseException) -> int | None:
    """Read a ``Retry-After`` header (seconds) from *error*, in ms."""
    headers = getattr(error, "headers", None)
    if not isinstance(headers, dict):
        return None
    raw = headers.get("retry-after") or headers.get("Retry-After")
    try:
        return int(raw) * 1000 if raw else None
    except (TypeError, ValueError):
        return None


class RetryChatMiddleware(agent_framework.ChatMiddleware):
    """Retries LLM calls on transient failures.

    Exponential backoff with up to 10% jitter, capped at
    ``max_delay_ms``.  A ``Retry-After`` header overrides the
    computed delay for that attempt.  Non-transient errors and the
    final failed attempt are re-raised unchanged.
    """

    def __init__(
        self,
        agent_name: str | None = None,
        *,
        max_retries: int = 3,
        initial_delay_ms: int = 1000,
        max_delay_ms: int = 20_000,
        multiplier: float = 2.0,
    ) -> None:
        self.agent_name = agent_name or "Unknown"
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.multiplier = multiplier
        super().__init__()

    async def process(self, context: agent_framework.ChatContext, next: _NextHandler) -> None:
        attempts = self.max_retries + 1
        delay_ms = float(self.initial_delay_ms)

        for attempt in range(1, attempts + 1):
            try:
                await next(context)
                return
            except Exception as exc:
                if attempt == attempts or not is_retryable(exc):
                    if attempt == attempts:
                        log.error(f"Agent '{self.agent_name}' gave up after {attempts} attempts: {exc}")
                    raise

                wait_ms = retry_after_ms(exc) or delay_ms
                wait_ms = min(wait_ms + random.uniform(0, wait_ms * 0.1), self.max_delay_ms)
                log.warn(
                    f"Agent '{self.agent_name}' attempt {attempt}/{attempts} failed,"
                    f" retrying in {wait_ms / 1000:.1f}s: {exc}"
                )
                await asyncio.sleep(wait_ms / 1000)
                delay_ms *= self.multiplier
