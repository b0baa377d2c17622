"""Shared catalog fixtures."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from catalog_search.models import BrandRef, CatalogItem, CategoryRef

APPLE = BrandRef(id="b-apple", name="Apple", slug="apple")
GOOGLE = BrandRef(id="b-google", name="Google", slug="google")
SAMSUNG = BrandRef(id="b-samsung", name="Samsung", slug="samsung")
PHONES = CategoryRef(id="c-phones", name="Smartphones", slug="smartphones")
LAPTOPS = CategoryRef(id="c-laptops", name="Laptops", slug="laptops")


@pytest.fixture
def make_item():
    counter = {"n": 0}

    def factory(name: str = "Item", **overrides) -> CatalogItem:
        counter["n"] += 1
        fields = {
            "id": f"item-{counter['n']}",
            "name": name,
            "brand": APPLE,
            "category": PHONES,
            "price": Decimal("100"),
            "stock_quantity": 5,
            "status": "active",
            "created_at": datetime(2024, 1, counter["n"] % 28 + 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return CatalogItem(**fields)

    return factory


@pytest.fixture
def catalog(make_item):
    return [
        make_item("iPhone 14", model="A2649", price=Decimal("799"), stock_quantity=10, average_rating=4.6),
        make_item("Pixel 8", brand=GOOGLE, model="GKWS6", price=Decimal("699"), stock_quantity=25),
        make_item("Galaxy S23", brand=SAMSUNG, model="SM-S911", price=Decimal("749"), stock_quantity=0),
        make_item("MacBook Air", category=LAPTOPS, model="M2", price=Decimal("1199"), stock_quantity=3),
        make_item("Pixel Tablet", brand=GOOGLE, category=LAPTOPS, price=Decimal("499"), status="inactive"),
    ]
