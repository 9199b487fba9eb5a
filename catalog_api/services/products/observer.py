"""Structured events emitted while a product is being created."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from catalog_api.models.product import CreateProductRequest
from catalog_api.models.validation import Violation

logger = logging.getLogger(__name__)


class CreationEvent:
    CREATION_STARTED = "product_creation_started"
    VALIDATION_FAILED = "product_validation_failed"
    DATABASE_OPERATION_STARTED = "database_operation_started"
    DATABASE_OPERATION_COMPLETED = "database_operation_completed"
    CACHE_OPERATION = "cache_operation_performed"
    CREATION_METRICS = "product_creation_metrics"


@dataclass(frozen=True)
class ProductCreationMetrics:
    operation_id: str
    product_name: str
    sku: str
    category: str
    validation_ms: float
    database_ms: float
    total_ms: float
    success: bool
    error_reason: str | None = None


class CreationObserver(ABC):
    """Side channel for the create flow. Implementations must not steer it."""

    @abstractmethod
    def creation_started(self, operation_id: str, request: CreateProductRequest) -> None:
        """Called once before any rule runs."""

    @abstractmethod
    def validation_failed(
        self,
        operation_id: str,
        request: CreateProductRequest,
        violations: Sequence[Violation],
    ) -> None:
        """Called when the request is rejected by field or uniqueness rules."""

    @abstractmethod
    def database_operation_started(self, operation_id: str, product_id: uuid.UUID) -> None:
        """Called right before the insert."""

    @abstractmethod
    def database_operation_completed(
        self,
        operation_id: str,
        product_id: uuid.UUID,
        duration_ms: float,
    ) -> None:
        """Called after the insert committed."""

    @abstractmethod
    def cache_operation(self, operation_id: str, key: str, action: str, success: bool) -> None:
        """Called after each cache call made by the flow."""

    @abstractmethod
    def creation_metrics(self, metrics: ProductCreationMetrics) -> None:
        """Called exactly once per request with the final timings."""


class LoggingCreationObserver(CreationObserver):
    """Default observer writing one structured log record per event."""

    def creation_started(self, operation_id: str, request: CreateProductRequest) -> None:
        logger.info(
            "Product creation started - operation=%s name=%r brand=%r sku=%r category=%r",
            operation_id,
            request.name,
            request.brand,
            request.sku,
            request.category,
            extra={"event": CreationEvent.CREATION_STARTED, "operation_id": operation_id},
        )

    def validation_failed(
        self,
        operation_id: str,
        request: CreateProductRequest,
        violations: Sequence[Violation],
    ) -> None:
        logger.warning(
            "Product validation failed - operation=%s sku=%r errors=%s",
            operation_id,
            request.sku,
            ", ".join(v.message for v in violations),
            extra={"event": CreationEvent.VALIDATION_FAILED, "operation_id": operation_id},
        )

    def database_operation_started(self, operation_id: str, product_id: uuid.UUID) -> None:
        logger.info(
            "Database operation started - operation=%s product_id=%s",
            operation_id,
            product_id,
            extra={
                "event": CreationEvent.DATABASE_OPERATION_STARTED,
                "operation_id": operation_id,
            },
        )

    def database_operation_completed(
        self,
        operation_id: str,
        product_id: uuid.UUID,
        duration_ms: float,
    ) -> None:
        logger.info(
            "Database operation completed - operation=%s product_id=%s duration=%.1fms",
            operation_id,
            product_id,
            duration_ms,
            extra={
                "event": CreationEvent.DATABASE_OPERATION_COMPLETED,
                "operation_id": operation_id,
            },
        )

    def cache_operation(self, operation_id: str, key: str, action: str, success: bool) -> None:
        level = logging.INFO if success else logging.WARNING
        logger.log(
            level,
            "Cache operation performed - operation=%s key=%s action=%s success=%s",
            operation_id,
            key,
            action,
            success,
            extra={"event": CreationEvent.CACHE_OPERATION, "operation_id": operation_id},
        )

    def creation_metrics(self, metrics: ProductCreationMetrics) -> None:
        logger.info(
            "Product creation %s - operation=%s validation=%.1fms database=%.1fms total=%.1fms%s",
            "COMPLETED" if metrics.success else "FAILED",
            metrics.operation_id,
            metrics.validation_ms,
            metrics.database_ms,
            metrics.total_ms,
            f", error: {metrics.error_reason}" if metrics.error_reason else "",
            extra={"event": CreationEvent.CREATION_METRICS, "metrics": asdict(metrics)},
        )


_observer = LoggingCreationObserver()


def get_creation_observer() -> CreationObserver:
    """FastAPI dependency factory."""

    return _observer
