"""Short-lived cache for repeated searches"""
import json
import time
from typing import Any, Callable, Dict, Optional, Tuple


def search_cache_key(query: str, filters: Optional[Dict[str, Any]]) -> str:
    return f"{query}_{json.dumps(filters or {}, sort_keys=True)}"


class SearchCache:
    """TTL cache with a size cap; the oldest entry is evicted first"""

    def __init__(self, ttl_seconds: float = 300, max_entries: int = 100, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, query: str, filters: Optional[Dict[str, Any]]) -> Optional[Any]:
        key = search_cache_key(query, filters)
        cached = self._entries.get(key)
        if cached is None:
            return None
        stored_at, results = cached
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return results

    def set(self, query: str, filters: Optional[Dict[str, Any]], results: Any) -> None:
        if self.max_entries <= 0:
            return
        key = search_cache_key(query, filters)
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), results)
        while len(self._entries) > self.max_entries:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]

    def clear(self) -> None:
        self._entries.clear()
