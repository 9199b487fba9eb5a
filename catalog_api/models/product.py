"""Product domain models and API schemas."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ProductCategory(str, Enum):
    """Closed set of catalog categories."""

    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    BOOKS = "Books"
    HOME = "Home"

    @classmethod
    def parse(cls, value: str | None) -> ProductCategory | None:
        """Resolve a category from its name, ignoring case. Unknown -> None."""
        if value is None:
            return None
        wanted = value.strip().lower()
        for category in cls:
            if category.value.lower() == wanted:
                return category
        return None


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


CENT = Decimal("0.01")


def _to_cents(value: Decimal | None) -> Decimal | None:
    # rules must see the same amount the store keeps
    if value is None:
        return None
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits to quantize; the price bound rejects it anyway
        return value


class CreateProductRequest(BaseModel):
    """Incoming payload for product creation.

    Fields stay permissive here so the rule engine can report every problem
    (missing name, unknown category, ...) in one response instead of failing
    on the first schema error.
    """

    name: str | None = None
    brand: str | None = None
    sku: str | None = None
    category: str | None = Field(
        None,
        description="One of Electronics, Clothing, Books, Home (case-insensitive)",
    )
    price: Decimal = Decimal("0")
    release_date: datetime | None = Field(
        None,
        description="Release timestamp; naive values are interpreted as UTC",
    )
    image_url: str | None = None
    stock_quantity: int = 1

    @field_validator("release_date")
    @classmethod
    def _normalize_release_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Decimal) -> Decimal:
        return _to_cents(value)

    @property
    def parsed_category(self) -> ProductCategory | None:
        return ProductCategory.parse(self.category)


class UpdateProductRequest(BaseModel):
    """Partial update; only the supplied fields are applied."""

    name: str | None = None
    brand: str | None = None
    sku: str | None = None
    category: str | None = None
    price: Decimal | None = None
    release_date: datetime | None = None
    image_url: str | None = None
    stock_quantity: int | None = None
    is_available: bool | None = None

    @field_validator("release_date")
    @classmethod
    def _normalize_release_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Decimal | None) -> Decimal | None:
        return _to_cents(value)

    def provided_fields(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ProductProfile(BaseModel):
    """Read-only view of a stored product with display fields derived on read."""

    id: uuid.UUID
    name: str
    brand: str
    sku: str
    category_display_name: str
    price: Decimal = Field(..., description="Effective price after category adjustments")
    formatted_price: str
    release_date: datetime
    created_at: datetime
    image_url: str | None = None
    is_available: bool
    stock_quantity: int
    product_age: str
    brand_initials: str
    availability_status: str
