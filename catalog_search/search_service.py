"""Cached search orchestration over the catalog adapters and the engine."""
from __future__ import annotations

import asyncio
import logging
from time import perf_counter

from .cache import ResultCache, make_cache_key
from .config import settings
from .engine import SearchEngine
from .models import (
    CacheStats,
    PopularQuery,
    PriceRange,
    SearchFilterOptions,
    SearchRequest,
    SearchResult,
)
from .repository import CatalogRepository, ReferenceLookup

logger = logging.getLogger(__name__)

MIN_SUGGESTION_QUERY_LENGTH = 2
POPULAR_SUGGESTION_POOL = 5

PRICE_RANGES = (
    PriceRange(label="Under $100", min=0, max=100),
    PriceRange(label="$100 - $500", min=100, max=500),
    PriceRange(label="$500 - $1000", min=500, max=1000),
    PriceRange(label="$1000 - $1500", min=1000, max=1500),
    PriceRange(label="Over $1500", min=1500, max=None),
)


class SearchService:
    """Wraps the ranking pipeline with slug resolution, candidate loading and the result cache.

    A cached result is returned verbatim; only a full computation touches the
    repository. Failures from the repository or the lookup propagate and
    leave the cache untouched.
    """

    def __init__(
        self,
        repository: CatalogRepository,
        lookup: ReferenceLookup,
        engine: SearchEngine | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.repository = repository
        self.lookup = lookup
        self.engine = engine or SearchEngine()
        self.cache = cache or ResultCache()

    async def search_products(self, request: SearchRequest) -> SearchResult:
        self.engine.popularity.record(request.query)
        cache_key = make_cache_key(request)
        cache_start = perf_counter()
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(
                "timing: total=%.2fms cache_hit=1 q=%r total=%s",
                (perf_counter() - cache_start) * 1000,
                request.query,
                cached.total,
            )
            return cached

        try:
            brand_id, category_id = await asyncio.gather(
                self.lookup.brand_id_by_slug(request.brand) if request.brand else _none(),
                self.lookup.category_id_by_slug(request.category) if request.category else _none(),
            )
            candidates = await self.repository.fetch_candidates(brand_id=brand_id, category_id=category_id)
        except Exception:
            logger.exception("Product search failed q=%r brand=%r category=%r", request.query, request.brand, request.category)
            raise

        result = self.engine.search(
            candidates, request, brand_id=brand_id, category_id=category_id, track_popularity=False
        )
        self.cache.set(cache_key, result)
        return result

    async def suggestions(self, query: str | None, limit: int | None = None) -> list[str]:
        """Popular queries and catalog names containing ``query``."""
        limit = limit or settings.suggestion_limit
        needle = (query or "").strip().lower()
        if len(needle) < MIN_SUGGESTION_QUERY_LENGTH:
            return []

        popular = [
            entry.query
            for entry in self.engine.popularity.top(POPULAR_SUGGESTION_POOL)
            if needle in entry.query
        ]
        candidates = await self.repository.fetch_candidates()
        names: list[str] = []
        for item in candidates:
            if needle in item.name.lower():
                names.append(item.name)
            if item.brand and needle in item.brand.name.lower():
                names.append(item.brand.name)
        return list(dict.fromkeys(popular + names))[:limit]

    async def filter_options(self) -> SearchFilterOptions:
        brands, categories = await asyncio.gather(self.lookup.list_brands(), self.lookup.list_categories())
        return SearchFilterOptions(brands=brands, categories=categories, priceRanges=list(PRICE_RANGES))

    def popular_queries(self, limit: int = 10) -> list[PopularQuery]:
        return self.engine.popularity.top(limit)

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()


async def _none() -> None:
    return None
