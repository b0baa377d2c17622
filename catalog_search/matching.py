"""Text matchers run over the filtered candidate set.

The set of strategies is closed: fuzzy, exact and partial-token. Each one
returns a :class:`MatchRecord` per item that qualified under it and nothing for
items that did not. :func:`run_matchers` evaluates all three independently;
combining them is the job of :mod:`catalog_search.scoring`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from rapidfuzz import fuzz

from .models import CatalogItem
from .text import fold_text, generate_keywords, tokenize

logger = logging.getLogger(__name__)


class MatcherKind(str, Enum):
    FUZZY = "fuzzy"
    EXACT = "exact"
    PARTIAL = "partial"


@dataclass(frozen=True)
class MatchRecord:
    item: CatalogItem
    score: float
    matches: tuple[tuple[str, str], ...]
    matcher: MatcherKind


# (field, weight) pairs searched by the fuzzy matcher.
FUZZY_FIELDS: tuple[tuple[str, float], ...] = (
    ("name", 0.40),
    ("brand", 0.30),
    ("category", 0.15),
    ("description", 0.10),
    ("model", 0.25),
    ("keywords", 0.20),
)
FUZZY_TOTAL_WEIGHT = sum(weight for _, weight in FUZZY_FIELDS)
# Maximum edit distance as a fraction of the pattern; 0 is a perfect match.
FUZZY_THRESHOLD = 0.4
MIN_MATCH_CHAR_LENGTH = 2
# Stand-in for a zero mismatch so the weighted product stays defined.
PERFECT_MATCH_FLOOR = 1e-6

EXACT_FIELD_SCORES: tuple[tuple[str, float], ...] = (
    ("name", 0.9),
    ("model", 0.8),
    ("brand", 0.7),
)
PARTIAL_FIELD_SCORES: tuple[tuple[str, float], ...] = (
    ("name", 0.3),
    ("brand", 0.2),
    ("category", 0.15),
    ("model", 0.15),
)


def field_values(item: CatalogItem, field: str) -> list[str]:
    """Return the raw text value(s) of a searchable field."""
    if field == "name":
        value = item.name
    elif field == "brand":
        value = item.brand.name if item.brand else None
    elif field == "category":
        value = item.category.name if item.category else None
    elif field == "description":
        value = item.description
    elif field == "model":
        value = item.model
    elif field == "keywords":
        return generate_keywords(item)
    else:
        raise ValueError(f"Unknown searchable field: {field}")
    return [value] if value else []


def _mismatch(pattern: str, text: str) -> float | None:
    """Normalized edit distance of ``pattern`` against ``text``.

    Returns ``None`` when the text is too short to match or the distance is
    beyond :data:`FUZZY_THRESHOLD`.
    """
    if len(text) < MIN_MATCH_CHAR_LENGTH:
        return None
    if len(text) >= len(pattern):
        similarity = fuzz.partial_ratio(pattern, text)
    else:
        similarity = fuzz.ratio(pattern, text)
    mismatch = 1.0 - similarity / 100.0
    if mismatch > FUZZY_THRESHOLD:
        return None
    return mismatch


def fuzzy_match(items: Sequence[CatalogItem], query: str) -> list[MatchRecord]:
    """Approximate matching across weighted fields.

    Every matched field contributes ``mismatch ** (weight / total_weight)`` to
    a product; the item score is one minus that product, so a single perfect
    field pushes the score close to 1 while weak matches on light fields stay
    low. Records come back best-first; ties keep candidate order.
    """
    pattern = fold_text(query)
    if len(pattern) < MIN_MATCH_CHAR_LENGTH:
        return []

    records: list[MatchRecord] = []
    for item in items:
        product = 1.0
        matched: list[tuple[str, str]] = []
        for field, weight in FUZZY_FIELDS:
            best: tuple[float, str] | None = None
            for value in field_values(item, field):
                mismatch = _mismatch(pattern, fold_text(value))
                if mismatch is not None and (best is None or mismatch < best[0]):
                    best = (mismatch, value)
            if best is None:
                continue
            product *= math.pow(max(best[0], PERFECT_MATCH_FLOOR), weight / FUZZY_TOTAL_WEIGHT)
            matched.append((field, best[1]))
        if matched:
            score = min(max(1.0 - product, 0.0), 1.0)
            records.append(MatchRecord(item, score, tuple(matched), MatcherKind.FUZZY))

    records.sort(key=lambda record: record.score, reverse=True)
    return records


def exact_match(items: Sequence[CatalogItem], query: str) -> list[MatchRecord]:
    """Case-insensitive substring containment with additive field scores."""
    needle = query.lower()
    records: list[MatchRecord] = []
    for item in items:
        score = 0.0
        matched: list[tuple[str, str]] = []
        for field, contribution in EXACT_FIELD_SCORES:
            for value in field_values(item, field):
                if needle in value.lower():
                    score += contribution
                    matched.append((field, value))
        if score > 0:
            records.append(MatchRecord(item, min(score, 1.0), tuple(matched), MatcherKind.EXACT))
    return records


def partial_match(items: Sequence[CatalogItem], query: str) -> list[MatchRecord]:
    """Per-token substring containment, accumulated across all tokens."""
    tokens = tokenize(query)
    records: list[MatchRecord] = []
    for item in items:
        score = 0.0
        matched: dict[tuple[str, str], None] = {}
        for token in tokens:
            for field, contribution in PARTIAL_FIELD_SCORES:
                for value in field_values(item, field):
                    if token in value.lower():
                        score += contribution
                        matched[(field, value)] = None
        if score > 0:
            records.append(MatchRecord(item, min(score, 1.0), tuple(matched), MatcherKind.PARTIAL))
    return records


MATCHERS = {
    MatcherKind.FUZZY: fuzzy_match,
    MatcherKind.EXACT: exact_match,
    MatcherKind.PARTIAL: partial_match,
}


def run_matchers(items: Sequence[CatalogItem], query: str) -> dict[MatcherKind, list[MatchRecord]]:
    """Run every matcher over the same candidates, in enum order."""
    outputs = {kind: MATCHERS[kind](items, query) for kind in MatcherKind}
    logger.debug(
        "matchers q=%r %s",
        query,
        " ".join(f"{kind.value}={len(records)}" for kind, records in outputs.items()),
    )
    return outputs
