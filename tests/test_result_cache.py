"""
tests/test_result_cache.py

Pytest unit tests for ResultCache, driven by a manual clock.
"""

from __future__ import annotations

import pytest

from app.config import ResultCacheSettings
from app.services.result_cache import ResultCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> ResultCache[str]:
    return ResultCache(ttl_seconds=60, max_entries=2, clock=clock)


def test_hit_skips_loader(cache) -> None:
    calls: list[str] = []

    def loader() -> str:
        calls.append("x")
        return "value"

    assert cache.get_or_load("k", loader) == "value"
    assert cache.get_or_load("k", loader) == "value"
    assert calls == ["x"]


def test_entry_expires_after_ttl(cache, clock) -> None:
    cache.put("k", "v1")
    clock.advance(59.9)
    assert cache.get("k") == "v1"
    clock.advance(0.1)
    assert cache.get("k") is None
    assert cache.get_or_load("k", lambda: "v2") == "v2"


def test_least_recently_used_is_evicted(cache) -> None:
    cache.put("a", "1")
    cache.put("b", "2")
    assert cache.get("a") == "1"
    cache.put("c", "3")
    assert cache.get("b") is None
    assert cache.get("a") == "1"
    assert cache.get("c") == "3"
    assert len(cache) == 2


def test_loader_exception_is_not_cached(cache) -> None:
    def failing() -> str:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        cache.get_or_load("k", failing)
    assert cache.get("k") is None
    assert cache.get_or_load("k", lambda: "ok") == "ok"


def test_invalidate_and_clear(cache) -> None:
    cache.put("a", "1")
    cache.put("b", "2")
    cache.invalidate("a")
    assert cache.get("a") is None
    cache.clear()
    assert len(cache) == 0


def test_len_ignores_expired_entries(cache, clock) -> None:
    cache.put("a", "1")
    clock.advance(61)
    assert len(cache) == 0


@pytest.mark.parametrize(("ttl", "max_entries"), [(0, 10), (-1, 10), (60, 0)])
def test_invalid_bounds_rejected(ttl: float, max_entries: int) -> None:
    with pytest.raises(ValueError):
        ResultCache(ttl_seconds=ttl, max_entries=max_entries)


def test_from_settings() -> None:
    cache: ResultCache[int] = ResultCache.from_settings(ResultCacheSettings(ttl_seconds=5, max_entries=1))
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") is None
    assert cache.get("b") == 2
