"""Text helpers shared by the matchers, the sorter and the popularity tracker.

Two flavours of normalization live here:

    1) :func:`normalize_query` is the canonical popularity key: trimmed and
       lowercased, nothing else, so ``"  Pixel "`` and ``"pixel"`` count as the
       same search.
    2) :func:`fold_text` is used for approximate matching and name ordering.
       It transliterates to ASCII with ``unidecode`` so accented spellings
       (``"café"``) line up with plain ones (``"cafe"``).
"""
from __future__ import annotations

import logging
import re

from unidecode import unidecode

from .models import CatalogItem

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_query(text: str | None) -> str:
    """Trim and lowercase a raw query."""
    return (text or "").strip().lower()


def fold_text(text: str | None) -> str:
    """ASCII-fold, lowercase and collapse whitespace."""
    if not text:
        return ""
    return " ".join(unidecode(text).lower().split())


def tokenize(text: str) -> list[str]:
    """Split on whitespace, dropping empty tokens."""
    return [token for token in _WHITESPACE_RE.split(text.lower()) if token]


def generate_keywords(item: CatalogItem) -> list[str]:
    """Derive the keyword list searched by the fuzzy matcher.

    Name words, the brand name, the category name and the model, lowercased,
    de-duplicated in order and with single-character entries removed.
    """
    keywords: list[str] = []
    if item.name:
        keywords.extend(tokenize(item.name))
    if item.brand and item.brand.name:
        keywords.append(item.brand.name.lower())
    if item.category and item.category.name:
        keywords.append(item.category.name.lower())
    if item.model:
        keywords.append(item.model.lower())
    return list(dict.fromkeys(keyword for keyword in keywords if len(keyword) > 1))


def name_sort_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering key, raw name as tie-break."""
    return (fold_text(name), name)
