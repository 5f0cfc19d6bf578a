"""Internal expiring cache for device lists and station snapshots."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pynetatmo._constants import CACHE_TTL

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it was stored."""

    value: V
    stored_at: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return (now - self.stored_at) < ttl


class TTLCache(Generic[K, V]):
    """Key/value store whose entries read as absent once *ttl* has elapsed.

    Stale entries are not evicted; they stay in the map until a ``put``
    supersedes them. The key space is small and fixed (one device-list
    key plus one key per station), so the map never grows unbounded.
    """

    def __init__(self, ttl: float = CACHE_TTL, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: K) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not entry.is_valid(self._clock(), self._ttl):
            return None
        return entry.value

    def put(self, key: K, value: V) -> None:
        entry = CacheEntry(value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and entry.is_valid(self._clock(), self._ttl)

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return sum(1 for entry in entries if entry.is_valid(now, self._ttl))
