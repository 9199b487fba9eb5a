"""Read, update and delete operations for products."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import Depends

from catalog_api.models.product import (
    CreateProductRequest,
    ProductProfile,
    UpdateProductRequest,
)
from catalog_api.models.validation import GENERAL_FIELD, Violation
from catalog_api.services.cache.catalog_cache import (
    ALL_PRODUCTS_KEY,
    CacheDependency,
    CatalogCache,
)
from catalog_api.services.clock import Clock, get_clock
from catalog_api.services.errors import DuplicateKeyError, FieldViolationError, NotFoundError
from catalog_api.services.products.derivation import build_product_profile
from catalog_api.services.products.rules import ProductRuleEngine, get_rule_engine
from catalog_api.services.storage.entities import Product
from catalog_api.services.storage.product_repository import (
    ProductRepository,
    get_product_repository,
)

logger = logging.getLogger(__name__)

# Fields that a PATCH may set to null; everything else treats null as "unchanged".
_NULLABLE_FIELDS = {"image_url"}


def _candidate_from(product: Product, changes: dict) -> CreateProductRequest:
    values = {
        "name": product.name,
        "brand": product.brand,
        "sku": product.sku,
        "category": product.category.value,
        "price": product.price,
        "release_date": product.release_date,
        "image_url": product.image_url,
        "stock_quantity": product.stock_quantity,
    }
    for key, value in changes.items():
        if key not in values:
            continue
        if value is None and key not in _NULLABLE_FIELDS:
            continue
        values[key] = value
    return CreateProductRequest(**values)


class ProductCatalogService:
    def __init__(
        self,
        *,
        repository: ProductRepository,
        cache: CatalogCache,
        rule_engine: ProductRuleEngine,
        clock: Clock,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._rules = rule_engine
        self._clock = clock

    async def get_product(self, product_id: uuid.UUID) -> ProductProfile:
        product = await self._require(product_id)
        return build_product_profile(product, self._clock())

    async def list_products(self) -> list[ProductProfile]:
        """All products, newest first; served from the cache while it is warm."""

        cached = await self._cache.try_get(ALL_PRODUCTS_KEY)
        if cached is not None:
            logger.debug("Serving %d products from cache", len(cached))
            return [ProductProfile.model_validate(item) for item in cached]

        now = self._clock()
        profiles = [build_product_profile(p, now) for p in await self._repository.list_all()]
        await self._cache.try_set(
            ALL_PRODUCTS_KEY,
            [profile.model_dump(mode="json") for profile in profiles],
        )
        return profiles

    async def update_product(
        self,
        product_id: uuid.UUID,
        patch: UpdateProductRequest,
    ) -> ProductProfile:
        """Apply a partial update after re-validating the merged product.

        The same field, category, cross-field and uniqueness rules as creation
        apply; the daily creation cap does not.
        """

        changes = patch.provided_fields()
        if not changes:
            raise FieldViolationError(
                [Violation(field=GENERAL_FIELD, message="At least one updatable field must be provided.")]
            )

        product = await self._require(product_id)
        candidate = _candidate_from(product, changes)
        now = self._clock()

        report = await self._rules.evaluate(
            candidate,
            now,
            exclude_id=product.id,
            include_business_rules=False,
        )
        if report.field_violations:
            raise FieldViolationError(report.field_violations + report.uniqueness_violations)
        if report.uniqueness_violations:
            raise DuplicateKeyError(report.uniqueness_violations[0].message)

        product.name = candidate.name.strip()
        product.brand = candidate.brand.strip()
        product.sku = candidate.sku.strip()
        product.category = candidate.parsed_category
        product.price = candidate.price
        product.release_date = candidate.release_date
        product.image_url = (candidate.image_url or "").strip() or None
        product.stock_quantity = candidate.stock_quantity
        if changes.get("is_available") is not None:
            product.is_available = changes["is_available"]

        product = await self._repository.update(product)
        await self._cache.try_invalidate(ALL_PRODUCTS_KEY)
        logger.info("Product %s updated (%s)", product.id, ", ".join(sorted(changes)))
        return build_product_profile(product, now)

    async def delete_product(self, product_id: uuid.UUID) -> None:
        product = await self._require(product_id)
        await self._repository.delete(product)
        await self._cache.try_invalidate(ALL_PRODUCTS_KEY)
        logger.info("Product %s deleted", product_id)

    async def _require(self, product_id: uuid.UUID) -> Product:
        product = await self._repository.get(product_id)
        if product is None:
            raise NotFoundError(f"Product with id {product_id} not found.")
        return product


def get_product_catalog_service(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    cache: CacheDependency,
    rule_engine: Annotated[ProductRuleEngine, Depends(get_rule_engine)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ProductCatalogService:
    return ProductCatalogService(
        repository=repository,
        cache=cache,
        rule_engine=rule_engine,
        clock=clock,
    )
