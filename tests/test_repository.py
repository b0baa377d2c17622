"""Catalog adapters: JSON file, Redis hashes and the Redis importer."""
import asyncio
import json

import fakeredis
import pytest
import redis

from catalog_search.importer import import_catalog, import_if_empty, reindex_data
from catalog_search.repository import (
    CatalogUnavailableError,
    JsonCatalogRepository,
    RedisCatalogRepository,
    parse_catalog,
    read_catalog_file,
)

RAW_ITEMS = [
    {
        "id": 1,
        "name": "iPhone 14",
        "model": "A2649",
        "brand": {"id": 10, "name": "Apple", "slug": "apple"},
        "category": {"id": 20, "name": "Smartphones", "slug": "smartphones"},
        "price": "799.00",
        "stock_quantity": 10,
        "status": "active",
    },
    {
        "id": 2,
        "name": "Pixel 8",
        "brand": {"id": 11, "name": "Google", "slug": "google"},
        "category": {"id": 20, "name": "Smartphones", "slug": "smartphones"},
        "price": 699,
        "stock_quantity": 0,
        "status": "inactive",
    },
]


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(RAW_ITEMS), encoding="utf-8")
    return path


def test_parse_catalog_derives_reference_data():
    data = parse_catalog(RAW_ITEMS)

    assert [item.id for item in data.items] == ["1", "2"]
    assert [brand.slug for brand in data.brands] == ["apple", "google"]
    assert [category.id for category in data.categories] == ["20"]


def test_parse_catalog_rejects_invalid_items():
    with pytest.raises(CatalogUnavailableError):
        parse_catalog({"items": [{"id": "x", "name": "Broken", "stock_quantity": -1}]})


def test_missing_file_and_lfs_pointer_yield_empty_catalog(tmp_path):
    pointer = tmp_path / "pointer.json"
    pointer.write_text("version https://git-lfs.github.com/spec/v1\noid sha256:abc\n", encoding="utf-8")

    assert read_catalog_file(tmp_path / "absent.json").items == []
    assert read_catalog_file(pointer).items == []


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CatalogUnavailableError):
        read_catalog_file(path)


def test_json_repository_serves_active_candidates(catalog_file):
    repository = JsonCatalogRepository(catalog_file)

    assert [item.name for item in asyncio.run(repository.fetch_candidates())] == ["iPhone 14"]
    assert asyncio.run(repository.fetch_candidates(brand_id="11")) == []
    assert asyncio.run(repository.brand_id_by_slug("google")) == "11"
    assert asyncio.run(repository.category_id_by_slug("tablets")) is None


def test_json_repository_reload_picks_up_changes(catalog_file):
    repository = JsonCatalogRepository(catalog_file)
    catalog_file.write_text(json.dumps(RAW_ITEMS[:1]), encoding="utf-8")

    assert repository.reload() == 1


def test_redis_round_trip_through_importer(catalog_file):
    client = fakeredis.FakeRedis()

    imported = asyncio.run(import_catalog(client, catalog_file, prefix="test"))
    repository = RedisCatalogRepository(client, prefix="test")

    assert imported == 2
    assert [item.name for item in asyncio.run(repository.fetch_candidates(category_id="20"))] == ["iPhone 14"]
    assert asyncio.run(repository.brand_id_by_slug("apple")) == "10"
    assert {brand.slug for brand in asyncio.run(repository.list_brands())} == {"apple", "google"}


def test_import_if_empty_skips_populated_store(catalog_file):
    client = fakeredis.FakeRedis()
    asyncio.run(import_catalog(client, catalog_file, prefix="test"))

    assert asyncio.run(import_if_empty(client, catalog_file, prefix="test")) == 0


def test_reindex_replaces_previous_documents(catalog_file, tmp_path):
    client = fakeredis.FakeRedis()
    asyncio.run(import_catalog(client, catalog_file, prefix="test"))
    smaller = tmp_path / "smaller.json"
    smaller.write_text(json.dumps(RAW_ITEMS[1:]), encoding="utf-8")

    assert asyncio.run(reindex_data(client, smaller, prefix="test")) == 1
    assert client.hlen("test:items") == 1


class BrokenClient:
    def hvals(self, key):
        raise redis.ConnectionError("connection refused")


def test_redis_failure_becomes_catalog_unavailable():
    repository = RedisCatalogRepository(BrokenClient(), prefix="test")

    with pytest.raises(CatalogUnavailableError):
        asyncio.run(repository.fetch_candidates())
