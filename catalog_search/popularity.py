"""Process-lifetime counter of submitted search queries."""
from __future__ import annotations

import logging
import threading
from collections import Counter

from .models import PopularQuery
from .text import normalize_query

logger = logging.getLogger(__name__)


class PopularityTracker:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def record(self, query: str | None) -> None:
        """Count a query; blank queries are ignored."""
        normalized = normalize_query(query)
        if not normalized:
            return
        with self._lock:
            self._counts[normalized] += 1

    def top(self, limit: int = 10) -> list[PopularQuery]:
        if limit <= 0:
            return []
        with self._lock:
            ranked = self._counts.most_common(limit)
        return [PopularQuery(query=query, count=count) for query, count in ranked]

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()
        logger.info("Popular query counters cleared")
