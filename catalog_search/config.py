"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    catalog_backend: str = _get_env("CATALOG_BACKEND", "json")
    catalog_path: str = _get_env("CATALOG_PATH", "catalog.json")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    redis_db: int = int(_get_env("REDIS_DB", "0"))
    catalog_key_prefix: str = _get_env("CATALOG_KEY_PREFIX", "catalog")
    candidate_limit: int = int(_get_env("CANDIDATE_LIMIT", "1000"))
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "300"))
    cache_max_entries: int = int(_get_env("CACHE_MAX_ENTRIES", "100"))
    default_limit: int = int(_get_env("DEFAULT_LIMIT", "50"))
    max_limit: int = int(_get_env("MAX_LIMIT", "100"))
    popular_limit_max: int = int(_get_env("POPULAR_LIMIT_MAX", "50"))
    suggestion_limit: int = int(_get_env("SUGGESTION_LIMIT", "10"))
    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "true").lower() in {"1", "true", "yes"}
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
