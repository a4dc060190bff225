"""
app/services/result_cache.py

Bounded, time-limited memoization for external adapter lookups.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from app.config import ResultCacheSettings

T = TypeVar("T")


@dataclass(frozen=True)
class _CacheEntry(Generic[T]):
    value: T
    expires_at: float


class ResultCache(Generic[T]):
    """
    Keyed store with per-entry TTL and least-recently-used eviction.

    The cache stores whatever the loader returns, including an adapter's
    fallback value. Exceptions raised by the loader are propagated and
    nothing is stored. All operations hold one lock, so a single key's
    write-then-read is atomic across threads.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1.")
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, _CacheEntry[T]] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ResultCacheSettings) -> "ResultCache[T]":
        return cls(ttl_seconds=settings.ttl_seconds, max_entries=settings.max_entries)

    def get(self, key: Hashable) -> T | None:
        """Return the live value for *key*, or ``None`` on a miss."""
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    def put(self, key: Hashable, value: T) -> None:
        with self._lock:
            self._store(key, value)

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        """
        Return the cached value for *key*, calling *loader* on a miss.

        The loader runs outside the lock so a slow adapter call does not
        block lookups for other keys.
        """

        with self._lock:
            entry = self._live_entry(key)
            if entry is not None:
                return entry.value

        value = loader()
        with self._lock:
            self._store(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _live_entry(self, key: Hashable) -> _CacheEntry[T] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def _store(self, key: Hashable, value: T) -> None:
        self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + self._ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
