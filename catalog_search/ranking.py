"""Ordering and pagination of scored records."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from .matching import MatchRecord
from .text import name_sort_key

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_at(record: MatchRecord) -> datetime:
    created = record.item.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


SORT_KEYS: dict[str, Callable[[MatchRecord], Any]] = {
    "relevance": lambda record: record.score,
    "price": lambda record: record.item.price,
    "name": lambda record: name_sort_key(record.item.name),
    "rating": lambda record: record.item.average_rating or 0,
    "date": _created_at,
    "stock": lambda record: record.item.stock_quantity,
}


def sort_records(records: Sequence[MatchRecord], sort_by: str, sort_order: str) -> list[MatchRecord]:
    """Stable sort; ``desc`` puts the largest key first, ``asc`` the smallest.

    Unknown sort keys fall back to relevance.
    """
    key = SORT_KEYS.get(sort_by)
    if key is None:
        logger.debug("unknown sort key %r, falling back to relevance", sort_by)
        key = SORT_KEYS["relevance"]
    return sorted(records, key=key, reverse=sort_order != "asc")


@dataclass(frozen=True)
class Page:
    records: list[MatchRecord]
    total: int
    has_next: bool
    has_prev: bool


def paginate(records: Sequence[MatchRecord], limit: int, offset: int) -> Page:
    total = len(records)
    return Page(
        records=list(records[offset:offset + limit]),
        total=total,
        has_next=offset + limit < total,
        has_prev=offset > 0,
    )
