"""Search-and-rank pipeline over an in-memory candidate list."""
from __future__ import annotations

import logging
from decimal import Decimal
from time import perf_counter
from typing import Sequence

from .filters import FilterSet, apply_filters
from .matching import MatcherKind, MatchRecord, run_matchers
from .models import (
    AppliedFilters,
    CatalogItem,
    MatchDetail,
    SearchRequest,
    SearchResult,
    SearchResultItem,
)
from .popularity import PopularityTracker
from .ranking import paginate, sort_records
from .scoring import apply_boosts, merge_matches

logger = logging.getLogger(__name__)

LOW_STOCK_LIMIT = 5
MEDIUM_STOCK_LIMIT = 20


def stock_status(quantity: int) -> str:
    if quantity <= 0:
        return "out_of_stock"
    if quantity <= LOW_STOCK_LIMIT:
        return "low_stock"
    if quantity <= MEDIUM_STOCK_LIMIT:
        return "medium_stock"
    return "in_stock"


def format_price(price: Decimal | None) -> str:
    return f"${(price or Decimal('0')):.2f}"


def discount_amount(item: CatalogItem) -> float:
    if item.original_price is None:
        return 0.0
    return round(float(item.original_price - item.price), 2)


def to_result_item(record: MatchRecord) -> SearchResultItem:
    item = record.item
    return SearchResultItem(
        **item.model_dump(),
        score=record.score,
        matches=[MatchDetail(field=field, value=value) for field, value in record.matches],
        in_stock=item.stock_quantity > 0,
        stock_status=stock_status(item.stock_quantity),
        price_display=format_price(item.price),
        discount_amount=discount_amount(item),
    )


def applied_filters(request: SearchRequest) -> AppliedFilters:
    return AppliedFilters(
        brand=request.brand,
        category=request.category,
        minPrice=request.min_price,
        maxPrice=request.max_price,
        inStock=request.in_stock,
    )


def rank(items: Sequence[CatalogItem], query: str) -> list[MatchRecord]:
    """Match, merge and boost the filtered items.

    Without a query every item is a full match with score 1.0 before boosts.
    """
    if query:
        outputs = run_matchers(items, query)
        merged = merge_matches(outputs[kind] for kind in MatcherKind)
    else:
        merged = [MatchRecord(item, 1.0, (), MatcherKind.EXACT) for item in items]
    return apply_boosts(merged)


class SearchEngine:
    """Runs the ranking pipeline and counts submitted queries.

    Callers that count queries themselves (the cached service counts before
    its cache lookup) pass ``track_popularity=False``.
    """

    def __init__(self, popularity: PopularityTracker | None = None) -> None:
        self.popularity = popularity or PopularityTracker()

    def search(
        self,
        candidates: Sequence[CatalogItem],
        request: SearchRequest,
        *,
        brand_id: str | None = None,
        category_id: str | None = None,
        track_popularity: bool = True,
    ) -> SearchResult:
        t0 = perf_counter()
        if track_popularity:
            self.popularity.record(request.query)

        filters = FilterSet.from_request(request, brand_id=brand_id, category_id=category_id)
        filtered = apply_filters(candidates, filters)
        t1 = perf_counter()
        scored = rank(filtered, request.query) if filtered else []
        t2 = perf_counter()
        ordered = sort_records(scored, request.sort_by, request.sort_order)
        page = paginate(ordered, request.limit, request.offset)
        results = [to_result_item(record) for record in page.records]
        t3 = perf_counter()

        total_ms = (t3 - t0) * 1000
        logger.info(
            "timing: total=%.2fms filter=%.2fms match=%.2fms rank=%.2fms q=%r candidates=%s total=%s",
            total_ms,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            (t3 - t2) * 1000,
            request.query,
            len(candidates),
            page.total,
        )
        return SearchResult(
            results=results,
            total=page.total,
            limit=request.limit,
            offset=request.offset,
            hasNext=page.has_next,
            hasPrev=page.has_prev,
            durationMs=round(total_ms, 3),
            query=request.query,
            echoedFilters=applied_filters(request),
        )
