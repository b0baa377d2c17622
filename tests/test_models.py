"""Request normalization: values are clamped or defaulted, never rejected."""

from catalog_search.models import SearchRequest


def test_limit_is_clamped_into_range():
    assert SearchRequest(limit=0).limit == 1
    assert SearchRequest(limit=-7).limit == 1
    assert SearchRequest(limit=500).limit == 100
    assert SearchRequest(limit="25").limit == 25


def test_absent_or_malformed_limit_and_offset_use_defaults():
    request = SearchRequest(limit=None, offset="not-a-number")

    assert request.limit == 50
    assert request.offset == 0


def test_offset_is_never_negative():
    assert SearchRequest(offset=-10).offset == 0
    assert SearchRequest(offset="30").offset == 30


def test_text_fields_are_trimmed():
    request = SearchRequest(query="  Pixel 8 ", brand="  ", category=" laptops ")

    assert request.query == "Pixel 8"
    assert request.brand is None
    assert request.category == "laptops"


def test_price_and_flag_parsing():
    request = SearchRequest(min_price="-3", max_price="", in_stock="true")

    assert request.min_price == 0.0
    assert request.max_price is None
    assert request.in_stock is True
    assert SearchRequest(in_stock="no").in_stock is False


def test_max_price_is_not_reordered():
    request = SearchRequest(min_price=500, max_price=100)

    assert (request.min_price, request.max_price) == (500, 100)


def test_sort_fields_are_normalized():
    assert SearchRequest(sort_order="UP").sort_order == "desc"
    assert SearchRequest(sort_order="ASC").sort_order == "asc"
    assert SearchRequest(sort_by=" Price ").sort_by == "price"
    assert SearchRequest(sort_by=None).sort_by == "relevance"


def test_non_finite_limit_and_offset_use_defaults():
    """Infinities and overflowing numbers are defaulted, not raised."""

    for value in ("inf", "-inf", "1e400", float("inf")):
        assert SearchRequest(limit=value).limit == 50
        assert SearchRequest(offset=value).offset == 0
    assert SearchRequest(limit="nan").limit == 50


def test_non_finite_prices_fall_back_to_defaults():
    request = SearchRequest(min_price="nan", max_price="nan")

    assert request.min_price == 0.0
    assert request.max_price is None
    assert SearchRequest(max_price="inf").max_price is None
    assert SearchRequest(min_price="-inf").min_price == 0.0
