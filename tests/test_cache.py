"""Tests for dataguardian.utils.cache."""

from __future__ import annotations

from dataguardian.utils import cache
from tests import fakes


class TestTTLCache:

    def test_hit_before_expiry(self, clock: fakes.FakeClock) -> None:
        c: cache.TTLCache[str] = cache.TTLCache(10, clock=clock)
        c.set("k", "v")
        clock.advance(9.999)
        assert c.get("k") == ("v", True)

    def test_expires_exactly_at_ttl(self, clock: fakes.FakeClock) -> None:
        c: cache.TTLCache[str] = cache.TTLCache(10, clock=clock)
        c.set("k", "v")
        clock.advance(10)
        assert c.get("k") == (None, False)
        assert len(c) == 0

    def test_per_entry_ttl_override(self, clock: fakes.FakeClock) -> None:
        c: cache.TTLCache[str] = cache.TTLCache(10, clock=clock)
        c.set("short", "v", ttl=1)
        c.set("long", "v")
        clock.advance(2)
        assert c.get("short")[1] is False
        assert c.get("long")[1] is True

    def test_set_replaces_and_restarts_ttl(self, clock: fakes.FakeClock) -> None:
        c: cache.TTLCache[str] = cache.TTLCache(10, clock=clock)
        c.set("k", "old")
        clock.advance(8)
        c.set("k", "new")
        clock.advance(8)
        assert c.get("k") == ("new", True)

    def test_evicts_oldest_when_full(self, clock: fakes.FakeClock) -> None:
        c: cache.TTLCache[int] = cache.TTLCache(10, max_entries=2, clock=clock)
        c.set("a", 1)
        c.set("b", 2)
        c.set("c", 3)
        assert c.get("a")[1] is False
        assert c.get("b") == (2, True)
        assert c.get("c") == (3, True)

