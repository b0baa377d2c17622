"""Structured filter stage applied before any text matching."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .models import CatalogItem, ItemStatus, SearchRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSet:
    """Exact-match constraints for one search.

    Resolved identifiers win over slugs: when the reference lookup produced an
    id it is compared against ``brand.id``/``category.id``; when only a slug is
    known (lookup missed) the slug itself is compared, so an unknown brand
    matches nothing.
    """

    brand_id: str | None = None
    brand_slug: str | None = None
    category_id: str | None = None
    category_slug: str | None = None
    min_price: float = 0.0
    max_price: float | None = None
    in_stock: bool = False

    @classmethod
    def from_request(
        cls,
        request: SearchRequest,
        *,
        brand_id: str | None = None,
        category_id: str | None = None,
    ) -> "FilterSet":
        return cls(
            brand_id=brand_id,
            brand_slug=request.brand,
            category_id=category_id,
            category_slug=request.category,
            min_price=request.min_price,
            max_price=request.max_price,
            in_stock=request.in_stock,
        )


def _matches_ref(ref, ref_id: str | None, ref_slug: str | None) -> bool:
    if ref_id is not None:
        return ref is not None and ref.id == ref_id
    if ref_slug is not None:
        return ref is not None and ref.slug == ref_slug
    return True


def matches_filters(item: CatalogItem, filters: FilterSet) -> bool:
    if item.status != ItemStatus.ACTIVE:
        return False
    if not _matches_ref(item.brand, filters.brand_id, filters.brand_slug):
        return False
    if not _matches_ref(item.category, filters.category_id, filters.category_slug):
        return False
    price = item.price if item.price is not None else Decimal("0")
    if price < Decimal(str(filters.min_price)):
        return False
    if filters.max_price is not None and price > Decimal(str(filters.max_price)):
        return False
    if filters.in_stock and item.stock_quantity <= 0:
        return False
    return True


def apply_filters(candidates: Iterable[CatalogItem], filters: FilterSet) -> list[CatalogItem]:
    """Return the candidates satisfying every constraint, order preserved."""
    survivors = [item for item in candidates if matches_filters(item, filters)]
    logger.debug("filter stage kept=%s filters=%s", len(survivors), filters)
    return survivors
