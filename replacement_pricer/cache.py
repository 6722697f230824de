from __future__ import annotations

import threading
from collections import OrderedDict

from .models import ResolutionResult

CacheKey = tuple[str, "float | None", float]


def cache_key(query: str, target: float | None, tolerance: float, *, prefix: int = 50) -> CacheKey:
    """Collapse near-duplicate inventory lines onto one entry."""
    return (" ".join(query.split()).lower()[:prefix], target, float(tolerance))


class QueryCache:
    """Bounded memo of resolved lookups, evicting the oldest insert first.

    Reads do not refresh an entry's position. Safe to share between threads.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self.capacity = capacity
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[CacheKey, ResolutionResult] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> ResolutionResult | None:
        with self._lock:
            result = self._entries.get(key)
            if result is None:
                self.misses += 1
            else:
                self.hits += 1
            return result

    def put(self, key: CacheKey, result: ResolutionResult) -> None:
        with self._lock:
            if key in self._entries:
                self._entries[key] = result
                return
            while len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
