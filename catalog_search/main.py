"""FastAPI application wiring the catalog search service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

import redis
from fastapi import Depends, FastAPI, HTTPException, Query

from .cache import ResultCache
from .config import settings
from .engine import SearchEngine
from .importer import import_if_empty, reindex_data
from .models import CacheStats, PopularQuery, SearchFilterOptions, SearchRequest, SearchResult
from .redis_client import get_client
from .repository import CatalogUnavailableError, JsonCatalogRepository, RedisCatalogRepository
from .search_service import SearchService

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# Force a predictable logging setup even when run under uvicorn. ``force=True``
# replaces uvicorn's default handlers.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

SEARCH_FAILED = "Search failed. Please try again."


def _uses_redis() -> bool:
    return settings.catalog_backend.lower() == "redis"


@lru_cache(maxsize=1)
def get_service() -> SearchService:
    if _uses_redis():
        repository = RedisCatalogRepository(get_client())
    else:
        repository = JsonCatalogRepository(settings.catalog_path)
    return SearchService(repository, repository, engine=SearchEngine(), cache=ResultCache())


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if _uses_redis() and settings.load_on_startup:
        try:
            imported = await import_if_empty(get_client())
        except (redis.RedisError, CatalogUnavailableError) as exc:
            logger.warning("Catalog import on startup failed: %s", exc)
        else:
            if imported:
                logger.info("Imported %s catalog items on startup", imported)
    yield


app = FastAPI(title="Catalog Search Service", lifespan=lifespan)


@app.get("/health")
async def health(service: SearchService = Depends(get_service)) -> dict:
    return {"backend": settings.catalog_backend, "cache": service.cache_stats().model_dump()}


@app.get("/api/products/search", response_model=SearchResult)
async def search(
    query: str | None = Query(None, description="Search query"),
    q: str | None = Query(None, description="Alias of query"),
    brand: str | None = None,
    category: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    in_stock: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    service: SearchService = Depends(get_service),
) -> SearchResult:
    request = SearchRequest(
        query=query or q,
        brand=brand,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    try:
        return await service.search_products(request)
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=502, detail=SEARCH_FAILED) from exc


@app.get("/api/products/search/suggestions", response_model=list[str])
async def suggestions(
    query: str | None = None,
    limit: int = Query(settings.suggestion_limit, ge=1, le=50),
    service: SearchService = Depends(get_service),
) -> list[str]:
    try:
        return await service.suggestions(query, limit)
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=502, detail="Failed to get suggestions") from exc


@app.get("/api/products/search/popular", response_model=list[PopularQuery])
async def popular(limit: str | None = None, service: SearchService = Depends(get_service)) -> list[PopularQuery]:
    try:
        parsed = int(limit) if limit else 10
    except ValueError:
        parsed = 10
    return service.popular_queries(max(1, min(parsed, settings.popular_limit_max)))


@app.get("/api/products/search/filters", response_model=SearchFilterOptions)
async def search_filters(service: SearchService = Depends(get_service)) -> SearchFilterOptions:
    try:
        return await service.filter_options()
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=502, detail="Failed to get search filters") from exc


@app.get("/api/admin/search/cache", response_model=CacheStats)
async def cache_stats(service: SearchService = Depends(get_service)) -> CacheStats:
    return service.cache_stats()


@app.delete("/api/admin/search/cache")
async def clear_cache(service: SearchService = Depends(get_service)) -> dict:
    service.clear_cache()
    return {"cleared": True}


@app.delete("/api/admin/search/popular")
async def clear_popular(service: SearchService = Depends(get_service)) -> dict:
    service.engine.popularity.clear()
    return {"cleared": True}


@app.post("/reindex")
async def reindex(service: SearchService = Depends(get_service)) -> dict:
    if _uses_redis():
        try:
            count = await reindex_data(get_client())
        except (redis.RedisError, CatalogUnavailableError) as exc:
            raise HTTPException(status_code=502, detail="Reindex failed") from exc
    elif isinstance(service.repository, JsonCatalogRepository):
        try:
            count = service.repository.reload()
        except CatalogUnavailableError as exc:
            raise HTTPException(status_code=502, detail="Reindex failed") from exc
    else:
        raise HTTPException(status_code=400, detail="Catalog backend cannot be reindexed")
    service.clear_cache()
    return {"indexed": count}
