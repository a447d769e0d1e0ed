"""In-process TTL cache with an injectable clock.

Used to memoise AI privacy summaries.  Entries expire a fixed
number of seconds after creation; expired entries are dropped
lazily on read.  All operations take a lock so a get/set from
concurrent analyses never corrupts the map. Racing writers for
the same key resolve as last-write-wins.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

from dataguardian.utils import logger

log = logger.create_logger("Cache")

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Keyed cache whose entries expire ``ttl`` seconds after ``set``.

    Args:
        default_ttl: Lifetime in seconds applied when ``set`` is
            called without an explicit ``ttl``.
        max_entries: Optional cap; when full the oldest entry is
            evicted first.
        clock: Returns the current time in seconds.  Defaults to
            ``time.time``; tests pass a fake to step across TTL
            boundaries deterministically.
    """

    def __init__(
        self,
        default_ttl: float,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[V, float, float]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[V | None, bool]:
        """Return ``(value, True)`` on a live hit, ``(None, False)`` otherwise."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            value, created_at, ttl = entry
            if self._clock() - created_at >= ttl:
                del self._entries[key]
                return None, False
            return value, True

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        """Store *value* under *key*, replacing any existing entry."""
        with self._lock:
            self._entries.pop(key, None)
            if self._max_entries is not None:
                while len(self._entries) >= self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    log.debug("Evicted oldest cache entry", {"key": evicted[:80]})
            self._entries[key] = (value, self._clock(), self._default_ttl if ttl is None else ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
