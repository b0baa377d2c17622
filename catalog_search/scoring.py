"""Merging of matcher outputs and business-relevance boosts."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from .matching import MatchRecord
from .models import CatalogItem

# Applied in this order, each multiplicative, before the final clamp.
FEATURED_BOOST = 1.20
BESTSELLER_BOOST = 1.15
HIGH_RATING_BOOST = 1.10
HIGH_RATING_THRESHOLD = 4
WELL_STOCKED_BOOST = 1.05
WELL_STOCKED_THRESHOLD = 10
OUT_OF_STOCK_PENALTY = 0.5
MAX_SCORE = 1.0


def merge_matches(outputs: Iterable[Sequence[MatchRecord]]) -> list[MatchRecord]:
    """Deduplicate per item, keeping the highest raw score.

    An item keeps the position of its first appearance; its explanations are
    the union of every matcher that found it.
    """
    merged: dict[str, MatchRecord] = {}
    for records in outputs:
        for record in records:
            existing = merged.get(record.item.id)
            if existing is None:
                merged[record.item.id] = record
                continue
            matches = tuple(dict.fromkeys(existing.matches + record.matches))
            merged[record.item.id] = replace(
                existing,
                score=max(existing.score, record.score),
                matches=matches,
            )
    return list(merged.values())


def boost_score(score: float, item: CatalogItem) -> float:
    if item.is_featured:
        score *= FEATURED_BOOST
    if item.is_bestseller:
        score *= BESTSELLER_BOOST
    if (item.average_rating or 0) > HIGH_RATING_THRESHOLD:
        score *= HIGH_RATING_BOOST
    if item.stock_quantity > WELL_STOCKED_THRESHOLD:
        score *= WELL_STOCKED_BOOST
    if item.stock_quantity <= 0:
        score *= OUT_OF_STOCK_PENALTY
    return max(0.0, min(score, MAX_SCORE))


def apply_boosts(records: Sequence[MatchRecord]) -> list[MatchRecord]:
    return [replace(record, score=boost_score(record.score, record.item)) for record in records]
