"""Browser-related models."""

from __future__ import annotations

import pydantic


class NavigationResult(pydantic.BaseModel):
    """Result of navigating to a URL.

    A timeout is reported with ``timed_out=True`` rather than as an
    error: callers keep whatever requests were observed before it.
    """

    success: bool
    timed_out: bool = False
    status_code: int | None = None
    error_message: str | None = None


class ViewportSize(pydantic.BaseModel):
    width: int
    height: int
