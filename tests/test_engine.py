"""End-to-end behaviour of the ranking pipeline."""
from decimal import Decimal

import pytest

from catalog_search.engine import SearchEngine, stock_status
from catalog_search.models import SearchRequest


def test_exact_name_query_scores_high(make_item):
    item = make_item("iPhone 14", price=Decimal("799"), stock_quantity=10)

    result = SearchEngine().search([item], SearchRequest(query="iphone"))

    assert result.total == 1
    assert result.results[0].id == item.id
    assert result.results[0].score > 0.8
    assert ("name", "iPhone 14") in [(m.field, m.value) for m in result.results[0].matches]


def test_unmatched_query_yields_empty_result(make_item):
    item = make_item("iPhone 14", price=Decimal("799"), stock_quantity=10)

    result = SearchEngine().search([item], SearchRequest(query="zzz-no-match"))

    assert result.total == 0
    assert result.results == []
    assert (result.hasNext, result.hasPrev) == (False, False)


def test_in_stock_filter_beats_text_score(make_item):
    empty = make_item("Galaxy S23", stock_quantity=0)
    stocked = make_item("Galaxy S22", stock_quantity=4)

    result = SearchEngine().search([empty, stocked], SearchRequest(query="galaxy s23", in_stock=True))

    assert [item.id for item in result.results] == [stocked.id]


def test_featured_item_scores_twenty_percent_higher_and_sorts_first(make_item):
    plain = make_item("Gadget", description="bundled with a charger")
    featured = make_item("Gadget", description="bundled with a charger", is_featured=True)

    result = SearchEngine().search([plain, featured], SearchRequest(query="charger"))

    first, second = result.results
    assert first.id == featured.id
    assert first.score == pytest.approx(second.score * 1.2)


def test_without_query_every_survivor_is_a_full_match(catalog):
    result = SearchEngine().search(catalog, SearchRequest())

    scores = {item.name: item.score for item in result.results}
    assert result.total == 4
    assert scores["MacBook Air"] == 1.0
    assert scores["Galaxy S23"] == 0.5
    assert all(item.matches == [] for item in result.results)


def test_scores_stay_within_bounds(catalog):
    result = SearchEngine().search(catalog, SearchRequest(query="pixel phone apple"))

    assert result.total > 0
    assert all(0.0 <= item.score <= 1.0 for item in result.results)


@pytest.mark.parametrize("limit,offset", [(1, 0), (2, 1), (2, 3), (3, 4), (100, 0)])
def test_pagination_is_consistent(catalog, limit, offset):
    result = SearchEngine().search(catalog, SearchRequest(limit=limit, offset=offset))

    assert result.total == 4
    assert result.hasNext == (offset + limit < result.total)
    assert result.hasPrev == (offset > 0)
    assert len(result.results) == max(0, min(limit, result.total - offset))


def test_sort_by_price_ascending(catalog):
    result = SearchEngine().search(catalog, SearchRequest(sort_by="price", sort_order="asc"))

    assert [item.name for item in result.results] == ["Pixel 8", "Galaxy S23", "iPhone 14", "MacBook Air"]


def test_results_are_enhanced(make_item):
    item = make_item("Pixel 8", price=Decimal("699"), original_price=Decimal("799.50"), stock_quantity=3)

    [enhanced] = SearchEngine().search([item], SearchRequest()).results

    assert enhanced.in_stock is True
    assert enhanced.stock_status == "low_stock"
    assert enhanced.price_display == "$699.00"
    assert enhanced.discount_amount == pytest.approx(100.5)


def test_stock_status_thresholds():
    assert [stock_status(n) for n in (0, 5, 6, 20, 21)] == [
        "out_of_stock",
        "low_stock",
        "medium_stock",
        "medium_stock",
        "in_stock",
    ]


def test_filters_and_query_are_echoed(catalog):
    request = SearchRequest(query=" Pixel ", brand="google", min_price=100, in_stock=True)

    result = SearchEngine().search(catalog, request)

    assert result.query == "Pixel"
    assert result.echoedFilters.model_dump() == {
        "brand": "google",
        "category": None,
        "minPrice": 100.0,
        "maxPrice": None,
        "inStock": True,
    }


def test_popular_queries_are_counted_per_call(catalog):
    engine = SearchEngine()
    for query in ("pixel", "pixel", "iphone", "Pixel "):
        engine.search(catalog, SearchRequest(query=query))
    engine.search(catalog, SearchRequest())

    assert [(entry.query, entry.count) for entry in engine.popularity.top(1)] == [("pixel", 3)]


def test_zero_result_queries_still_count(catalog):
    engine = SearchEngine()
    engine.search(catalog, SearchRequest(query="zzz-no-match"))

    assert engine.popularity.top(1)[0].query == "zzz-no-match"


def test_nan_price_bounds_are_treated_as_absent(catalog):
    result = SearchEngine().search(catalog, SearchRequest(min_price="nan", max_price="nan"))

    assert result.total == 4
    assert result.echoedFilters.maxPrice is None


def test_engine_can_leave_counting_to_the_caller(catalog):
    engine = SearchEngine()
    engine.search(catalog, SearchRequest(query="pixel"), track_popularity=False)

    assert engine.popularity.top(5) == []
