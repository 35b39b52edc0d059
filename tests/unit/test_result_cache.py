from __future__ import annotations

import pytest

from src.domain.algorithms.result_cache import ItineraryCache, cache_key


@pytest.mark.unit
def test_cache_key_sorts_targets_and_buckets_by_minute() -> None:
    assert cache_key(36059, "X", {"B", "A"}) == ("X", "A,B", "", 600)
    assert cache_key(36000, "X", ["A", "B"]) == cache_key(36059, "X", ["B", "A"])
    assert cache_key(36060, "X", ["A"]) != cache_key(36059, "X", ["A"])
    assert cache_key(36000, "X", ["A"], "20240115") != cache_key(
        36000, "X", ["A"], "20240114"
    )


@pytest.mark.unit
def test_same_minute_returns_identical_object() -> None:
    cache: ItineraryCache[list[str]] = ItineraryCache(capacity=10)
    calls: list[int] = []

    def compute() -> list[str]:
        calls.append(1)
        return ["option"]

    first = cache.get_or_compute(36000, "X", {"Y"}, compute)
    second = cache.get_or_compute(36059, "X", {"Y"}, compute)
    assert second is first
    assert len(calls) == 1

    later = cache.get_or_compute(36060, "X", {"Y"}, compute)
    assert later is not first
    assert len(calls) == 2


@pytest.mark.unit
def test_eviction_removes_oldest_inserted_first() -> None:
    cache: ItineraryCache[str] = ItineraryCache(capacity=2)
    k1 = cache_key(0, "A", ["Z"])
    k2 = cache_key(0, "B", ["Z"])
    k3 = cache_key(0, "C", ["Z"])

    cache.put(k1, "one")
    cache.put(k2, "two")
    # A hit does not refresh the entry.
    assert cache.get(k1) == "one"
    cache.put(k3, "three")

    assert k1 not in cache
    assert k2 in cache and k3 in cache
    assert len(cache) == 2


@pytest.mark.unit
def test_get_or_compute_evicts_beyond_capacity() -> None:
    cache: ItineraryCache[str] = ItineraryCache(capacity=1)
    cache.get_or_compute(0, "A", ["Z"], lambda: "a")
    cache.get_or_compute(0, "B", ["Z"], lambda: "b")
    assert len(cache) == 1
    assert cache.get(cache_key(0, "B", ["Z"])) == "b"


@pytest.mark.unit
def test_clear_and_capacity_validation() -> None:
    cache: ItineraryCache[str] = ItineraryCache(capacity=3)
    cache.put(cache_key(0, "A", ["Z"]), "a")
    cache.clear()
    assert len(cache) == 0

    with pytest.raises(ValueError):
        ItineraryCache(capacity=0)


@pytest.mark.unit
def test_same_minute_on_another_service_date_is_recomputed() -> None:
    cache: ItineraryCache[str] = ItineraryCache(capacity=10)

    monday = cache.get_or_compute(36000, "X", {"Y"}, lambda: "mon", "20240115")
    sunday = cache.get_or_compute(36000, "X", {"Y"}, lambda: "sun", "20240114")

    assert (monday, sunday) == ("mon", "sun")
    assert len(cache) == 2
