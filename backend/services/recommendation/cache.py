"""LRU cache of ranked recommendation batches.

Keyed by ``(seeker_id, profile_version, corpus_version, as_of date)``. A
new profile or corpus version simply misses; stale entries age out of the
LRU or are dropped with ``invalidate``.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Hashable

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]


class RecommendationCache:
    def __init__(self, max_entries: int = 256) -> None:
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, Any] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey) -> Any | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def put(self, key: CacheKey, value: Any) -> None:
        if self._max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %s", evicted)

    def invalidate(self, seeker_id: str | None = None) -> int:
        """Drop entries for one seeker, or everything. Returns the count dropped."""
        with self._lock:
            if seeker_id is None:
                dropped = len(self._entries)
                self._entries.clear()
            else:
                stale = [k for k in self._entries if k[0] == seeker_id]
                for k in stale:
                    del self._entries[k]
                dropped = len(stale)
        if dropped:
            logger.info("Invalidated %d cached recommendation batches", dropped)
        return dropped

    def __len__(self) -> int:
        return len(self._entries)
