"""Product creation: validate, check uniqueness, apply business rules, persist,
invalidate the list cache and derive the response.

A rejected request never reaches the store. A successful one performs exactly
one insert and at most one cache invalidation.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from fastapi import Depends

from catalog_api.models.product import CreateProductRequest, ProductProfile
from catalog_api.services.cache.catalog_cache import (
    ALL_PRODUCTS_KEY,
    CacheDependency,
    CatalogCache,
)
from catalog_api.services.clock import Clock, get_clock
from catalog_api.services.errors import (
    BusinessRuleError,
    CatalogError,
    DuplicateKeyError,
    FieldViolationError,
)
from catalog_api.services.products.derivation import build_product_profile
from catalog_api.services.products.observer import (
    CreationObserver,
    ProductCreationMetrics,
    get_creation_observer,
)
from catalog_api.services.products.rules import ProductRuleEngine, get_rule_engine
from catalog_api.services.storage.entities import Product
from catalog_api.services.storage.product_repository import (
    ProductRepository,
    get_product_repository,
)

logger = logging.getLogger(__name__)


class CreationStage(str, Enum):
    VALIDATING = "validating"
    CHECKING_UNIQUENESS = "checking_uniqueness"
    APPLYING_BUSINESS_RULES = "applying_business_rules"
    PERSISTING = "persisting"
    INVALIDATING_CACHE = "invalidating_cache"
    DERIVING = "deriving"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"


def _elapsed_ms(started: float | None, finished: float | None = None) -> float:
    if started is None:
        return 0.0
    return ((finished or time.perf_counter()) - started) * 1000


def _new_operation_id() -> str:
    return uuid.uuid4().hex[:8].upper()


def to_entity(request: CreateProductRequest, created_at: datetime) -> Product:
    """Copy a validated request into a new product row."""
    return Product(
        id=uuid.uuid4(),
        name=request.name.strip(),
        brand=request.brand.strip(),
        sku=request.sku.strip(),
        category=request.parsed_category,
        price=request.price,
        release_date=request.release_date,
        image_url=(request.image_url or "").strip() or None,
        stock_quantity=request.stock_quantity,
        is_available=True,
        created_at=created_at,
    )


class CreateProductHandler:
    """Runs one product creation from request to response view."""

    def __init__(
        self,
        *,
        repository: ProductRepository,
        cache: CatalogCache,
        rule_engine: ProductRuleEngine,
        observer: CreationObserver,
        clock: Clock,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._rules = rule_engine
        self._observer = observer
        self._clock = clock

    async def handle(self, request: CreateProductRequest) -> ProductProfile:
        operation_id = _new_operation_id()
        now = self._clock()
        total_started = time.perf_counter()
        validation_started = total_started
        validation_finished: float | None = None
        database_started: float | None = None
        database_finished: float | None = None
        stage = CreationStage.VALIDATING

        def metrics(success: bool, error_reason: str | None = None) -> ProductCreationMetrics:
            return ProductCreationMetrics(
                operation_id=operation_id,
                product_name=request.name or "",
                sku=request.sku or "",
                category=request.category or "",
                validation_ms=_elapsed_ms(validation_started, validation_finished),
                database_ms=_elapsed_ms(database_started, database_finished),
                total_ms=_elapsed_ms(total_started),
                success=success,
                error_reason=error_reason,
            )

        self._notify(self._observer.creation_started, operation_id, request)

        try:
            report = await self._rules.evaluate(request, now)

            if report.field_violations:
                validation_finished = time.perf_counter()
                violations = report.field_violations + report.uniqueness_violations
                self._notify(self._observer.validation_failed, operation_id, request, violations)
                error = FieldViolationError(violations)
                self._reject(operation_id, stage, metrics(False, f"Validation failed: {error}"))
                raise error

            stage = CreationStage.CHECKING_UNIQUENESS
            if report.uniqueness_violations:
                validation_finished = time.perf_counter()
                self._notify(
                    self._observer.validation_failed,
                    operation_id,
                    request,
                    report.uniqueness_violations,
                )
                error = DuplicateKeyError(report.uniqueness_violations[0].message)
                self._reject(operation_id, stage, metrics(False, "Duplicate key"))
                raise error

            stage = CreationStage.APPLYING_BUSINESS_RULES
            if report.business_violations:
                validation_finished = time.perf_counter()
                reasons = [v.message for v in report.business_violations]
                logger.warning(
                    "Business rules rejected product - operation=%s reasons=%s",
                    operation_id,
                    "; ".join(reasons),
                    extra={"operation_id": operation_id, "reasons": reasons},
                )
                self._reject(
                    operation_id,
                    stage,
                    metrics(False, "Business rules failed: " + "; ".join(reasons)),
                )
                raise BusinessRuleError(reasons)

            validation_finished = time.perf_counter()

            stage = CreationStage.PERSISTING
            product = to_entity(request, created_at=now)
            self._notify(self._observer.database_operation_started, operation_id, product.id)
            database_started = time.perf_counter()
            try:
                product = await self._repository.insert(product)
            except DuplicateKeyError as exc:
                # lost a race against a concurrent insert with the same key
                database_finished = time.perf_counter()
                self._reject(operation_id, stage, metrics(False, str(exc)))
                raise
            database_finished = time.perf_counter()
            self._notify(
                self._observer.database_operation_completed,
                operation_id,
                product.id,
                _elapsed_ms(database_started, database_finished),
            )

            stage = CreationStage.INVALIDATING_CACHE
            await self._invalidate_list_cache(operation_id)

            stage = CreationStage.DERIVING
            profile = build_product_profile(product, now)

            stage = CreationStage.SUCCEEDED
            self._notify(self._observer.creation_metrics, metrics(True))
            logger.info(
                "Product created - operation=%s product_id=%s",
                operation_id,
                product.id,
                extra={"operation_id": operation_id, "stage": stage.value},
            )
            return profile
        except CatalogError:
            raise
        except Exception as exc:
            self._notify(self._observer.creation_metrics, metrics(False, str(exc)))
            logger.error(
                "Product creation failed - operation=%s stage=%s name=%r sku=%r",
                operation_id,
                stage.value,
                request.name,
                request.sku,
                exc_info=True,
            )
            raise

    def _reject(
        self,
        operation_id: str,
        stage: CreationStage,
        metrics: ProductCreationMetrics,
    ) -> None:
        logger.info(
            "Product creation rejected - operation=%s stage=%s",
            operation_id,
            stage.value,
            extra={"operation_id": operation_id, "stage": CreationStage.REJECTED.value},
        )
        self._notify(self._observer.creation_metrics, metrics)

    async def _invalidate_list_cache(self, operation_id: str) -> None:
        removed = await self._cache.try_invalidate(ALL_PRODUCTS_KEY)
        self._notify(
            self._observer.cache_operation, operation_id, ALL_PRODUCTS_KEY, "remove", removed
        )

    @staticmethod
    def _notify(callback: Callable[..., Any], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            name = getattr(callback, "__name__", repr(callback))
            logger.warning("Creation observer failed in %s", name, exc_info=True)


def get_create_product_handler(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    cache: CacheDependency,
    rule_engine: Annotated[ProductRuleEngine, Depends(get_rule_engine)],
    observer: Annotated[CreationObserver, Depends(get_creation_observer)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CreateProductHandler:
    return CreateProductHandler(
        repository=repository,
        cache=cache,
        rule_engine=rule_engine,
        observer=observer,
        clock=clock,
    )
