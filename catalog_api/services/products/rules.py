"""Rule engine for product candidates.

Rules are grouped in tiers that are always all evaluated, so a rejected
request reports every problem at once:

* field-shape rules (no I/O)
* uniqueness rules (store lookups)
* category rules, one registry keyed by :class:`ProductCategory`
* the cross-field stock rule and the aggregate business rules
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Annotated
from urllib.parse import urlparse

from fastapi import Depends

from catalog_api.config import settings
from catalog_api.models.product import CreateProductRequest, ProductCategory
from catalog_api.models.validation import GENERAL_FIELD, Violation
from catalog_api.services.products.rule_config import ProductRuleSet, get_rule_set
from catalog_api.services.storage.product_repository import (
    DUPLICATE_NAME_MESSAGE,
    DUPLICATE_SKU_MESSAGE,
    ProductRepository,
    get_product_repository,
)

logger = logging.getLogger(__name__)

SKU_PATTERN = re.compile(r"[A-Za-z0-9-]{5,20}")
BRAND_PATTERN = re.compile(r"[A-Za-z0-9\s\-.'’]+")

MAX_PRICE = Decimal("10000")
MAX_STOCK = 100_000
MIN_RELEASE_YEAR = 1900
ELECTRONICS_MIN_PRICE = Decimal("50")
ELECTRONICS_MAX_AGE_YEARS = 5
HOME_MAX_PRICE = Decimal("200")
EXPENSIVE_PRICE = Decimal("100")
EXPENSIVE_MAX_STOCK = 20
HIGH_VALUE_PRICE = Decimal("500")
HIGH_VALUE_MAX_STOCK = 10


@dataclass(frozen=True)
class RuleContext:
    now: datetime
    rule_set: ProductRuleSet


Predicate = Callable[[CreateProductRequest, RuleContext], bool]


def _always(candidate: CreateProductRequest) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    """A synchronous rule: ``check`` must hold whenever ``applies`` does."""

    field: str
    message: str | Callable[[RuleContext], str]
    check: Predicate
    applies: Callable[[CreateProductRequest], bool] = _always

    def evaluate(self, candidate: CreateProductRequest, context: RuleContext) -> Violation | None:
        if not self.applies(candidate) or self.check(candidate, context):
            return None
        message = self.message(context) if callable(self.message) else self.message
        return Violation(field=self.field, message=message)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _present(name: str) -> Callable[[CreateProductRequest], bool]:
    return lambda candidate: not _blank(getattr(candidate, name))


def _has_release_date(candidate: CreateProductRequest) -> bool:
    return candidate.release_date is not None


def _contains_any(text: str, words: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # Feb 29 -> Feb 28
        return moment.replace(year=moment.year - years, day=28)


def is_valid_image_url(url: str, extensions: tuple[str, ...]) -> bool:
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return parsed.path.lower().endswith(extensions)


def _image_url_message(context: RuleContext) -> str:
    return (
        "Image URL must be a valid http/https image URL ending with "
        + "/".join(context.rule_set.image_extensions)
        + "."
    )


FIELD_RULES: tuple[Rule, ...] = (
    # name
    Rule("name", "Name is required.", lambda c, ctx: not _blank(c.name)),
    Rule(
        "name",
        "Name must be 200 characters or fewer.",
        lambda c, ctx: len(c.name) <= 200,
        _present("name"),
    ),
    Rule(
        "name",
        "Name contains inappropriate content.",
        lambda c, ctx: not _contains_any(c.name, ctx.rule_set.inappropriate_words),
        _present("name"),
    ),
    # brand
    Rule("brand", "Brand is required.", lambda c, ctx: not _blank(c.brand)),
    Rule(
        "brand",
        "Brand must be between 2 and 100 characters.",
        lambda c, ctx: 2 <= len(c.brand) <= 100,
        _present("brand"),
    ),
    Rule(
        "brand",
        "Brand contains invalid characters (allowed: letters, spaces, hyphens, "
        "apostrophes, dots, numbers).",
        lambda c, ctx: BRAND_PATTERN.fullmatch(c.brand) is not None,
        _present("brand"),
    ),
    # sku
    Rule("sku", "SKU is required.", lambda c, ctx: not _blank(c.sku)),
    Rule(
        "sku",
        "SKU must be alphanumeric with optional hyphens and be 5-20 characters.",
        lambda c, ctx: SKU_PATTERN.fullmatch(c.sku.strip()) is not None,
        _present("sku"),
    ),
    # category
    Rule("category", "Category is required.", lambda c, ctx: not _blank(c.category)),
    Rule(
        "category",
        "Invalid category value.",
        lambda c, ctx: c.parsed_category is not None,
        _present("category"),
    ),
    # price
    Rule("price", "Price must be greater than 0.", lambda c, ctx: c.price > 0),
    Rule("price", "Price must be less than 10,000.", lambda c, ctx: c.price < MAX_PRICE),
    # release date
    Rule("release_date", "Release date is required.", lambda c, ctx: c.release_date is not None),
    Rule(
        "release_date",
        "Release date cannot be in the future.",
        lambda c, ctx: c.release_date <= ctx.now,
        _has_release_date,
    ),
    Rule(
        "release_date",
        "Release date cannot be before year 1900.",
        lambda c, ctx: c.release_date.year >= MIN_RELEASE_YEAR,
        _has_release_date,
    ),
    # stock
    Rule(
        "stock_quantity",
        "Stock quantity cannot be negative.",
        lambda c, ctx: c.stock_quantity >= 0,
    ),
    Rule(
        "stock_quantity",
        "Stock quantity cannot exceed 100,000.",
        lambda c, ctx: c.stock_quantity <= MAX_STOCK,
    ),
    # image url, only when supplied
    Rule(
        "image_url",
        _image_url_message,
        lambda c, ctx: is_valid_image_url(c.image_url, ctx.rule_set.image_extensions),
        _present("image_url"),
    ),
)


CATEGORY_RULES: dict[ProductCategory, tuple[Rule, ...]] = {
    ProductCategory.ELECTRONICS: (
        Rule(
            "price",
            "Electronics products must have a minimum price of $50.00.",
            lambda c, ctx: c.price >= ELECTRONICS_MIN_PRICE,
        ),
        Rule(
            "name",
            "Electronics product name must contain technology-related keywords.",
            lambda c, ctx: _contains_any(c.name, ctx.rule_set.technology_keywords),
            _present("name"),
        ),
        Rule(
            "release_date",
            "Electronics products must be released within the last 5 years.",
            lambda c, ctx: c.release_date >= _years_before(ctx.now, ELECTRONICS_MAX_AGE_YEARS),
            _has_release_date,
        ),
    ),
    ProductCategory.HOME: (
        Rule(
            "price",
            "Home products must have a maximum price of $200.00.",
            lambda c, ctx: c.price <= HOME_MAX_PRICE,
        ),
        Rule(
            "name",
            "Home product name contains restricted words.",
            lambda c, ctx: not _contains_any(c.name, ctx.rule_set.home_restricted_words),
            _present("name"),
        ),
    ),
    ProductCategory.CLOTHING: (
        Rule(
            "brand",
            "Clothing products require a brand name of at least 3 characters.",
            lambda c, ctx: len(c.brand.strip()) >= 3,
            _present("brand"),
        ),
    ),
}


CROSS_FIELD_RULES: tuple[Rule, ...] = (
    Rule(
        GENERAL_FIELD,
        "Expensive products (>$100) must have limited stock (≤20 units).",
        lambda c, ctx: c.price <= EXPENSIVE_PRICE or c.stock_quantity <= EXPENSIVE_MAX_STOCK,
    ),
)


@dataclass
class ValidationReport:
    """Violations from one evaluation, kept apart by how they are reported."""

    field_violations: list[Violation] = field(default_factory=list)
    uniqueness_violations: list[Violation] = field(default_factory=list)
    business_violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not (
            self.field_violations or self.uniqueness_violations or self.business_violations
        )


class ProductRuleEngine:
    """Evaluates every rule tier against one candidate."""

    def __init__(
        self,
        repository: ProductRepository,
        rule_set: ProductRuleSet,
        *,
        daily_limit: int,
    ) -> None:
        self._repository = repository
        self._rule_set = rule_set
        self._daily_limit = daily_limit

    def check_fields(self, candidate: CreateProductRequest, now: datetime) -> list[Violation]:
        """Shape, category and cross-field rules; no I/O."""
        context = RuleContext(now=now, rule_set=self._rule_set)
        rules = list(FIELD_RULES)
        category = candidate.parsed_category
        if category is not None:
            rules.extend(CATEGORY_RULES.get(category, ()))
        rules.extend(CROSS_FIELD_RULES)

        violations = []
        for rule in rules:
            violation = rule.evaluate(candidate, context)
            if violation is not None:
                violations.append(violation)
        return violations

    async def check_uniqueness(
        self,
        candidate: CreateProductRequest,
        *,
        exclude_id: uuid.UUID | None = None,
    ) -> list[Violation]:
        violations = []
        if not _blank(candidate.name) and not _blank(candidate.brand):
            if await self._repository.name_brand_exists(
                candidate.name.strip(), candidate.brand.strip(), exclude_id=exclude_id
            ):
                logger.warning(
                    "Duplicate product name detected for name=%r brand=%r",
                    candidate.name,
                    candidate.brand,
                )
                violations.append(Violation(field="name", message=DUPLICATE_NAME_MESSAGE))

        if not _blank(candidate.sku):
            if await self._repository.sku_exists(candidate.sku.strip(), exclude_id=exclude_id):
                logger.warning("Duplicate SKU detected: %s", candidate.sku)
                violations.append(Violation(field="sku", message=DUPLICATE_SKU_MESSAGE))
        return violations

    async def check_business_rules(
        self,
        candidate: CreateProductRequest,
        now: datetime,
    ) -> list[Violation]:
        violations = []

        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        added_today = await self._repository.count_created_since(day_start)
        if added_today >= self._daily_limit:
            logger.warning("Daily product addition limit reached: %d", added_today)
            violations.append(
                Violation(
                    field=GENERAL_FIELD,
                    message=f"Daily product addition limit of {self._daily_limit} reached.",
                )
            )

        if candidate.price > HIGH_VALUE_PRICE and candidate.stock_quantity > HIGH_VALUE_MAX_STOCK:
            logger.warning(
                "High-value product stock limit exceeded: price=%s stock=%d",
                candidate.price,
                candidate.stock_quantity,
            )
            violations.append(
                Violation(
                    field=GENERAL_FIELD,
                    message="High-value products (>$500) must have limited stock (≤10 units).",
                )
            )

        if not violations:
            logger.info(
                "Business rules passed for product name=%r sku=%r",
                candidate.name,
                candidate.sku,
            )
        return violations

    async def evaluate(
        self,
        candidate: CreateProductRequest,
        now: datetime,
        *,
        exclude_id: uuid.UUID | None = None,
        include_business_rules: bool = True,
    ) -> ValidationReport:
        report = ValidationReport(field_violations=self.check_fields(candidate, now))
        report.uniqueness_violations = await self.check_uniqueness(
            candidate, exclude_id=exclude_id
        )
        if include_business_rules:
            report.business_violations = await self.check_business_rules(candidate, now)
        return report


def get_rule_engine(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    rule_set: Annotated[ProductRuleSet, Depends(get_rule_set)],
) -> ProductRuleEngine:
    return ProductRuleEngine(
        repository,
        rule_set,
        daily_limit=settings.DAILY_PRODUCT_LIMIT,
    )
