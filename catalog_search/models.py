"""Pydantic models for catalog items, search requests and responses."""
from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from .config import settings

Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

SORT_ORDERS = {"asc", "desc"}
_TRUTHY = {"1", "true", "yes", "on"}


class ItemStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


class BrandRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    slug: str


class CategoryRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    slug: str


class CatalogItem(BaseModel):
    """Read-only catalog entry with denormalized brand and category."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    model: str | None = None
    description: str | None = None
    brand: BrandRef | None = None
    category: CategoryRef | None = None
    price: Price = Decimal("0")
    original_price: Price | None = None
    stock_quantity: int = Field(0, ge=0)
    status: ItemStatus = ItemStatus.ACTIVE
    is_featured: bool = False
    is_bestseller: bool = False
    average_rating: float | None = Field(None, ge=0, le=5)
    created_at: datetime | None = None


def _coerce_float(value: Any) -> float | None:
    """Parse a number, treating blanks, garbage, NaN and infinities as absent."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _coerce_int(value: Any, default: int) -> int:
    number = _coerce_float(value)
    return default if number is None else int(number)


class SearchRequest(BaseModel):
    """Typed search request.

    Out-of-range or malformed values are clamped or defaulted instead of
    rejected, so any structurally valid input produces a usable request.
    ``max_price`` is never reordered against ``min_price``.
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field("", description="Free-text query")
    brand: str | None = Field(None, description="Brand slug")
    category: str | None = Field(None, description="Category slug")
    min_price: float = 0.0
    max_price: float | None = None
    in_stock: bool = False
    sort_by: str = "relevance"
    sort_order: str = "desc"
    limit: int = settings.default_limit
    offset: int = 0

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("brand", "category", mode="before")
    @classmethod
    def _blank_slug_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        slug = str(value).strip()
        return slug or None

    @field_validator("min_price", mode="before")
    @classmethod
    def _default_min_price(cls, value: Any) -> float:
        price = _coerce_float(value)
        return price if price is not None and price > 0 else 0.0

    @field_validator("max_price", mode="before")
    @classmethod
    def _parse_max_price(cls, value: Any) -> float | None:
        return _coerce_float(value)

    @field_validator("in_stock", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)

    @field_validator("sort_by", mode="before")
    @classmethod
    def _normalize_sort_by(cls, value: Any) -> str:
        return str(value).strip().lower() if value else "relevance"

    @field_validator("sort_order", mode="before")
    @classmethod
    def _normalize_sort_order(cls, value: Any) -> str:
        order = str(value).strip().lower() if value else "desc"
        return order if order in SORT_ORDERS else "desc"

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: Any) -> int:
        limit = _coerce_int(value, settings.default_limit)
        return max(1, min(limit, settings.max_limit))

    @field_validator("offset", mode="before")
    @classmethod
    def _clamp_offset(cls, value: Any) -> int:
        return max(0, _coerce_int(value, 0))


class MatchDetail(BaseModel):
    field: str
    value: str


class SearchResultItem(CatalogItem):
    score: float
    matches: list[MatchDetail] = Field(default_factory=list)
    in_stock: bool
    stock_status: str
    price_display: str
    discount_amount: float = 0.0


class AppliedFilters(BaseModel):
    brand: str | None = None
    category: str | None = None
    minPrice: float = 0.0
    maxPrice: float | None = None
    inStock: bool = False


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    results: list[SearchResultItem]
    total: int
    limit: int
    offset: int
    hasNext: bool
    hasPrev: bool
    durationMs: float
    query: str = ""
    echoedFilters: AppliedFilters


class CacheStats(BaseModel):
    total: int
    active: int
    expired: int
    ttl: int


class PopularQuery(BaseModel):
    query: str
    count: int


class PriceRange(BaseModel):
    label: str
    min: float
    max: float | None = None


class SearchFilterOptions(BaseModel):
    brands: list[BrandRef]
    categories: list[CategoryRef]
    priceRanges: list[PriceRange]
