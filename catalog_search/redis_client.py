"""Redis client factory for the catalog store."""
from __future__ import annotations

import logging
from functools import lru_cache

import redis

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> redis.Redis:
    logger.info("Connecting to Redis at %s:%s/%s", settings.redis_host, settings.redis_port, settings.redis_db)
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        decode_responses=False,
    )
