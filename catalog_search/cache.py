"""In-process result cache with a fixed TTL and a size ceiling.

Expiry is lazy: entries are checked when read, and expired entries are swept
only when the cache is full and a new key has to be admitted. All operations
hold a single lock, so a stored entry is swapped in atomically.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import settings
from .models import CacheStats, SearchRequest, SearchResult

logger = logging.getLogger(__name__)


def make_cache_key(request: SearchRequest) -> str:
    """Canonical key over every request field, defaults included.

    Fields are serialized with sorted keys, so the order in which a caller
    supplied them never changes the key.
    """
    payload = json.dumps(request.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    expires_at: float
    result: SearchResult


class ResultCache:
    def __init__(
        self,
        ttl_seconds: int | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[SearchResult]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                self._store.pop(key, None)
                return None
            return entry.result

    def set(self, key: str, result: SearchResult) -> None:
        with self._lock:
            now = self._clock()
            if key not in self._store and len(self._store) >= self.max_entries:
                self._evict(now)
            self._store[key] = CacheEntry(now + self.ttl_seconds, result)
        logger.debug("cache_store key=%s ttl=%s", key[:12], self.ttl_seconds)

    def _evict(self, now: float) -> None:
        expired = [key for key, entry in self._store.items() if now > entry.expires_at]
        for key in expired:
            del self._store[key]
        overflow = len(self._store) - self.max_entries + 1
        # Not LRU: oldest insertions go first.
        for key in list(self._store)[:max(overflow, 0)]:
            del self._store[key]
        logger.debug("cache_sweep expired=%s evicted=%s", len(expired), max(overflow, 0))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
        logger.info("Search cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            total = len(self._store)
            expired = sum(1 for entry in self._store.values() if now > entry.expires_at)
        return CacheStats(total=total, active=total - expired, expired=expired, ttl=self.ttl_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
