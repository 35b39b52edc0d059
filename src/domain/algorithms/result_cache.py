from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Collection
from typing import Generic, TypeVar

T = TypeVar("T")

CacheKey = tuple[str, str, str, int]


def cache_key(
    now_s: int,
    origin_stop_id: str,
    target_stop_ids: Collection[str],
    service_date: str = "",
) -> CacheKey:
    """(origin, sorted comma-joined targets, service date, minute bucket of now)."""

    return (
        origin_stop_id,
        ",".join(sorted(target_stop_ids)),
        service_date,
        int(now_s) // 60,
    )


class ItineraryCache(Generic[T]):
    """Bounded memo of search results, evicting the oldest inserted entry first.

    A hit does not refresh an entry's position (insertion order, not LRU).
    """

    def __init__(self, capacity: int = 120) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = int(capacity)
        self._entries: OrderedDict[CacheKey, T] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, value: T) -> None:
        with self._lock:
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_compute(
        self,
        now_s: int,
        origin_stop_id: str,
        target_stop_ids: Collection[str],
        compute: Callable[[], T],
        service_date: str = "",
    ) -> T:
        key = cache_key(now_s, origin_stop_id, target_stop_ids, service_date)
        with self._lock:
            if key in self._entries:
                return self._entries[key]

        # Computed outside the lock; a concurrent miss on the same key may
        # compute twice, and the first stored value wins.
        value = compute()

        with self._lock:
            if key in self._entries:
                return self._entries[key]
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
        return value
