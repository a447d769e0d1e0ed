"""Shared fixtures for the test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dataguardian.models import site, summary
from dataguardian.storage import site_store
from tests import fakes


@pytest.fixture()
def clock() -> fakes.FakeClock:
    """A clock that only moves when told to."""
    return fakes.FakeClock()


@pytest.fixture()
def ai_summary_factory() -> Callable[..., summary.AISummary]:
    return fakes.make_ai_summary


@pytest.fixture()
def record_factory() -> Callable[..., site.AnalysisResult]:
    return fakes.make_record


@pytest.fixture()
def memory_store() -> site_store.InMemorySiteStore:
    return site_store.InMemorySiteStore()
