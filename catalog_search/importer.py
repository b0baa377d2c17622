"""Loads the JSON catalog file into the Redis catalog hashes."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable

import redis
from pydantic import BaseModel

from .config import settings
from .repository import CatalogUnavailableError, read_catalog_file

logger = logging.getLogger(__name__)

CATALOG_HASHES = ("items", "brands", "categories")


def _mapping(documents: Iterable[BaseModel]) -> dict[str, str]:
    return {doc.id: json.dumps(doc.model_dump(mode="json")) for doc in documents}


def _write_catalog(client: redis.Redis, prefix: str, path: Path) -> int:
    data = read_catalog_file(path)
    if not data.items:
        return 0
    try:
        pipe = client.pipeline()
        for name, documents in (("items", data.items), ("brands", data.brands), ("categories", data.categories)):
            mapping = _mapping(documents)
            if mapping:
                pipe.hset(f"{prefix}:{name}", mapping=mapping)
        pipe.execute()
    except redis.RedisError as exc:
        raise CatalogUnavailableError(f"Failed to import {path} into Redis") from exc
    return len(data.items)


async def import_catalog(client: redis.Redis, path: str | Path | None = None, prefix: str | None = None) -> int:
    prefix = prefix or settings.catalog_key_prefix
    source = Path(path or settings.catalog_path)
    count = await asyncio.to_thread(_write_catalog, client, prefix, source)
    logger.info("Imported %s catalog items from %s into %s:*", count, source, prefix)
    return count


async def import_if_empty(client: redis.Redis, path: str | Path | None = None, prefix: str | None = None) -> int:
    prefix = prefix or settings.catalog_key_prefix
    existing = await asyncio.to_thread(client.hlen, f"{prefix}:items")
    if existing > 0:
        return 0
    return await import_catalog(client, path, prefix)


async def reindex_data(client: redis.Redis, path: str | Path | None = None, prefix: str | None = None) -> int:
    prefix = prefix or settings.catalog_key_prefix
    await asyncio.to_thread(client.delete, *(f"{prefix}:{name}" for name in CATALOG_HASHES))
    return await import_catalog(client, path, prefix)
