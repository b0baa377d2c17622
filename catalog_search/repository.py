"""Catalog Repository and Reference Lookup adapters.

The engine never reads storage itself. These adapters hand it the active
candidate list (brand and category denormalized) and resolve human-readable
slugs to stable identifiers. Two backends are provided: a JSON catalog file
loaded into memory and a set of Redis hashes.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import redis
from pydantic import ValidationError

from .config import settings
from .models import BrandRef, CatalogItem, CategoryRef, ItemStatus

logger = logging.getLogger(__name__)


class CatalogUnavailableError(RuntimeError):
    """The backing catalog store could not be read."""


class CatalogRepository(Protocol):
    async def fetch_candidates(
        self, *, brand_id: str | None = None, category_id: str | None = None
    ) -> list[CatalogItem]: ...


class ReferenceLookup(Protocol):
    async def brand_id_by_slug(self, slug: str) -> str | None: ...

    async def category_id_by_slug(self, slug: str) -> str | None: ...

    async def list_brands(self) -> list[BrandRef]: ...

    async def list_categories(self) -> list[CategoryRef]: ...


@dataclass
class CatalogData:
    items: list[CatalogItem]
    brands: list[BrandRef] = field(default_factory=list)
    categories: list[CategoryRef] = field(default_factory=list)


def _unique_refs(refs: list[Any]) -> list[Any]:
    seen: dict[str, Any] = {}
    for ref in refs:
        if ref is not None and ref.id not in seen:
            seen[ref.id] = ref
    return list(seen.values())


def parse_catalog(payload: Any) -> CatalogData:
    """Build catalog data from a list of items or an object with ``items``.

    Brands and categories default to those referenced by the items when the
    payload does not list them explicitly.
    """
    if isinstance(payload, list):
        payload = {"items": payload}
    if not isinstance(payload, dict):
        raise CatalogUnavailableError("Catalog payload must be a list or an object")
    try:
        items = [CatalogItem.model_validate(raw) for raw in payload.get("items", [])]
        brands = [BrandRef.model_validate(raw) for raw in payload.get("brands", [])]
        categories = [CategoryRef.model_validate(raw) for raw in payload.get("categories", [])]
    except ValidationError as exc:
        raise CatalogUnavailableError(f"Invalid catalog payload: {exc}") from exc
    return CatalogData(
        items=items,
        brands=brands or _unique_refs([item.brand for item in items]),
        categories=categories or _unique_refs([item.category for item in items]),
    )


def read_catalog_file(path: Path) -> CatalogData:
    if not path.exists():
        logger.warning("Catalog file %s is missing", path)
        return CatalogData(items=[])
    try:
        with path.open("r", encoding="utf-8") as fh:
            # Detect Git LFS placeholder to avoid attempting to parse it as JSON.
            first_line = fh.readline()
            if first_line.startswith("version https://git-lfs.github.com/spec/v1"):
                logger.warning("Catalog file %s is a Git LFS pointer; real data not downloaded", path)
                return CatalogData(items=[])
            fh.seek(0)
            payload = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogUnavailableError(f"Failed to read catalog file {path}") from exc
    return parse_catalog(payload)


class InMemoryCatalogRepository:
    """Serves a catalog already loaded into memory."""

    def __init__(self, data: CatalogData, candidate_limit: int | None = None) -> None:
        self.data = data
        self.candidate_limit = candidate_limit or settings.candidate_limit

    async def fetch_candidates(
        self, *, brand_id: str | None = None, category_id: str | None = None
    ) -> list[CatalogItem]:
        candidates = [
            item
            for item in self.data.items
            if item.status == ItemStatus.ACTIVE
            and (brand_id is None or (item.brand is not None and item.brand.id == brand_id))
            and (category_id is None or (item.category is not None and item.category.id == category_id))
        ]
        return candidates[: self.candidate_limit]

    async def brand_id_by_slug(self, slug: str) -> str | None:
        return next((brand.id for brand in self.data.brands if brand.slug == slug), None)

    async def category_id_by_slug(self, slug: str) -> str | None:
        return next((category.id for category in self.data.categories if category.slug == slug), None)

    async def list_brands(self) -> list[BrandRef]:
        return list(self.data.brands)

    async def list_categories(self) -> list[CategoryRef]:
        return list(self.data.categories)


class JsonCatalogRepository(InMemoryCatalogRepository):
    """Catalog file on disk, read once and served from memory."""

    def __init__(self, path: str | Path, candidate_limit: int | None = None) -> None:
        self.path = Path(path)
        super().__init__(read_catalog_file(self.path), candidate_limit)
        logger.info("Loaded %s catalog items from %s", len(self.data.items), self.path)

    def reload(self) -> int:
        self.data = read_catalog_file(self.path)
        return len(self.data.items)


class RedisCatalogRepository(InMemoryCatalogRepository):
    """Catalog stored in Redis hashes, one JSON document per field.

    Keys are ``{prefix}:items``, ``{prefix}:brands`` and ``{prefix}:categories``.
    Every read fetches the hashes again so imports are picked up without a
    restart; blocking client calls are wrapped with ``asyncio.to_thread``.
    """

    def __init__(self, client: redis.Redis, prefix: str | None = None, candidate_limit: int | None = None) -> None:
        super().__init__(CatalogData(items=[]), candidate_limit)
        self.client = client
        self.prefix = prefix or settings.catalog_key_prefix

    def key(self, name: str) -> str:
        return f"{self.prefix}:{name}"

    def _read_hash(self, name: str) -> list[Any]:
        try:
            values = self.client.hvals(self.key(name))
        except redis.RedisError as exc:
            logger.error("Redis read of %s failed: %s", self.key(name), exc)
            raise CatalogUnavailableError(f"Catalog hash {self.key(name)} unavailable") from exc
        try:
            return [json.loads(value) for value in values]
        except json.JSONDecodeError as exc:
            raise CatalogUnavailableError(f"Corrupt document in {self.key(name)}") from exc

    def _load(self) -> CatalogData:
        return parse_catalog(
            {
                "items": self._read_hash("items"),
                "brands": self._read_hash("brands"),
                "categories": self._read_hash("categories"),
            }
        )

    async def refresh(self) -> CatalogData:
        self.data = await asyncio.to_thread(self._load)
        return self.data

    async def fetch_candidates(
        self, *, brand_id: str | None = None, category_id: str | None = None
    ) -> list[CatalogItem]:
        await self.refresh()
        return await super().fetch_candidates(brand_id=brand_id, category_id=category_id)

    async def brand_id_by_slug(self, slug: str) -> str | None:
        await self.refresh()
        return await super().brand_id_by_slug(slug)

    async def category_id_by_slug(self, slug: str) -> str | None:
        await self.refresh()
        return await super().category_id_by_slug(slug)

    async def list_brands(self) -> list[BrandRef]:
        await self.refresh()
        return await super().list_brands()

    async def list_categories(self) -> list[CategoryRef]:
        await self.refresh()
        return await super().list_categories()
