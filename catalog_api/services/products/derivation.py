"""Display fields computed from a stored product.

Everything here is pure: the same product and the same ``now`` always give
the same profile.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal

from catalog_api.models.product import ProductCategory, ProductProfile
from catalog_api.services.storage.entities import Product

HOME_DISCOUNT_FACTOR = Decimal("0.9")

CATEGORY_DISPLAY_NAMES = {
    ProductCategory.ELECTRONICS: "Electronics & Technology",
    ProductCategory.CLOTHING: "Clothing & Fashion",
    ProductCategory.BOOKS: "Books & Media",
    ProductCategory.HOME: "Home & Garden",
}

_BRAND_SEPARATORS = re.compile(r"[ \-_]+")


def category_display_name(category: ProductCategory | None) -> str:
    return CATEGORY_DISPLAY_NAMES.get(category, "Uncategorized")


def effective_price(category: ProductCategory | None, price: Decimal) -> Decimal:
    """Price shown to clients; Home items carry a 10% reduction."""
    if category == ProductCategory.HOME:
        return price * HOME_DISCOUNT_FACTOR
    return price


def format_price(amount: Decimal) -> str:
    """Render an amount as en-US currency text, e.g. ``$1,234.50``."""
    return f"${amount:,.2f}"


def product_age(release_date: datetime, now: datetime) -> str:
    """Bucket the time since release using whole elapsed days."""
    days = (now - release_date).days

    if days < 30:
        return "New Release"
    if days < 365:
        return f"{days // 30} months old"
    if days < 1825:
        return f"{days // 365} years old"
    return "Classic"


def brand_initials(brand: str | None) -> str:
    words = [w for w in _BRAND_SEPARATORS.split(brand or "") if w]
    if len(words) >= 2:
        return f"{words[0][0]}{words[-1][0]}".upper()
    if len(words) == 1:
        return words[0][0].upper()
    return "?"


def availability_status(is_available: bool, stock_quantity: int) -> str:
    if not is_available:
        return "Out of Stock"
    if stock_quantity == 0:
        return "Unavailable"
    if stock_quantity == 1:
        return "Last Item"
    if stock_quantity <= 5:
        return "Limited Stock"
    return "In Stock"


def visible_image_url(category: ProductCategory | None, image_url: str | None) -> str | None:
    if category == ProductCategory.HOME:
        return None
    return image_url


def build_product_profile(product: Product, now: datetime) -> ProductProfile:
    """Project a stored product into its response view."""

    price = effective_price(product.category, product.price)
    return ProductProfile(
        id=product.id,
        name=product.name,
        brand=product.brand,
        sku=product.sku,
        category_display_name=category_display_name(product.category),
        price=price,
        formatted_price=format_price(price),
        release_date=product.release_date,
        created_at=product.created_at,
        image_url=visible_image_url(product.category, product.image_url),
        is_available=product.is_available,
        stock_quantity=product.stock_quantity,
        product_age=product_age(product.release_date, now),
        brand_initials=brand_initials(product.brand),
        availability_status=availability_status(product.is_available, product.stock_quantity),
    )
