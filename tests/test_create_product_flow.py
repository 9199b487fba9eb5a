"""Unit tests for the product creation flow with in-memory collaborators."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from catalog_api.models.product import CreateProductRequest
from catalog_api.services.errors import BusinessRuleError, DuplicateKeyError, FieldViolationError
from catalog_api.services.products.create_flow import CreateProductHandler
from catalog_api.services.products.observer import CreationObserver
from catalog_api.services.products.rule_config import ProductRuleSet
from catalog_api.services.products.rules import ProductRuleEngine

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


class _InMemoryRepository:
    def __init__(self, *, created_today=0, fail_insert=None):
        self.products = []
        self.created_today = created_today
        self.fail_insert = fail_insert

    async def sku_exists(self, sku, *, exclude_id=None):
        return any(p.sku == sku for p in self.products)

    async def name_brand_exists(self, name, brand, *, exclude_id=None):
        return any(p.name == name and p.brand == brand for p in self.products)

    async def count_created_since(self, since):
        return self.created_today

    async def insert(self, product):
        if self.fail_insert is not None:
            raise self.fail_insert
        self.products.append(product)
        return product


class _RecordingCache:
    def __init__(self, *, healthy=True):
        self.healthy = healthy
        self.invalidated = []

    async def try_invalidate(self, key):
        if not self.healthy:
            return False
        self.invalidated.append(key)
        return True


class _RecordingObserver(CreationObserver):
    def __init__(self, *, explode=False):
        self.events = []
        self.metrics = []
        self.explode = explode

    def _record(self, name):
        self.events.append(name)
        if self.explode:
            raise RuntimeError("observer down")

    def creation_started(self, operation_id, request):
        self._record("started")

    def validation_failed(self, operation_id, request, violations):
        self._record("validation_failed")

    def database_operation_started(self, operation_id, product_id):
        self._record("db_started")

    def database_operation_completed(self, operation_id, product_id, duration_ms):
        self._record("db_completed")

    def cache_operation(self, operation_id, key, action, success):
        self._record(f"cache_{action}_{success}")

    def creation_metrics(self, metrics):
        self.metrics.append(metrics)
        self._record("metrics")


def _request(**overrides) -> CreateProductRequest:
    values = {
        "name": "Oak Side Table",
        "brand": "Birch and Beam",
        "sku": "BB-TBL-001",
        "category": "Home",
        "price": Decimal("120.00"),
        "release_date": NOW - timedelta(days=45),
        "image_url": "https://cdn.example.com/table.webp",
        "stock_quantity": 7,
    }
    values.update(overrides)
    return CreateProductRequest(**values)


def _handler(repository=None, cache=None, observer=None, daily_limit=500):
    repository = repository or _InMemoryRepository()
    return CreateProductHandler(
        repository=repository,
        cache=cache or _RecordingCache(),
        rule_engine=ProductRuleEngine(repository, ProductRuleSet(), daily_limit=daily_limit),
        observer=observer or _RecordingObserver(),
        clock=lambda: NOW,
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_successful_creation_persists_once_and_invalidates():
    repository = _InMemoryRepository()
    cache = _RecordingCache()
    observer = _RecordingObserver()

    profile = await _handler(repository, cache, observer).handle(_request())

    assert len(repository.products) == 1
    assert cache.invalidated == ["all_products"]
    assert profile.price == Decimal("108.000")
    assert profile.image_url is None
    assert profile.product_age == "1 months old"
    assert profile.brand_initials == "BB"
    assert observer.events == [
        "started",
        "db_started",
        "db_completed",
        "cache_remove_True",
        "metrics",
    ]
    assert observer.metrics[0].success is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rejected_request_never_reaches_store():
    repository = _InMemoryRepository()
    cache = _RecordingCache()
    observer = _RecordingObserver()

    with pytest.raises(FieldViolationError) as excinfo:
        await _handler(repository, cache, observer).handle(_request(price=Decimal("0")))

    assert any(v.field == "price" for v in excinfo.value.violations)
    assert repository.products == []
    assert cache.invalidated == []
    assert observer.events == ["started", "validation_failed", "metrics"]
    assert observer.metrics[0].success is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_field_violations_take_precedence_over_duplicates():
    repository = _InMemoryRepository()
    handler = _handler(repository)
    await handler.handle(_request())

    with pytest.raises(FieldViolationError) as excinfo:
        await handler.handle(_request(name="Oak Side Table", stock_quantity=-1))

    fields = [v.field for v in excinfo.value.violations]
    assert "stock_quantity" in fields
    assert "sku" in fields


@pytest.mark.unit
@pytest.mark.asyncio
async def test_duplicate_sku_is_a_duplicate_key_error():
    repository = _InMemoryRepository()
    handler = _handler(repository)
    await handler.handle(_request())

    with pytest.raises(DuplicateKeyError) as excinfo:
        await handler.handle(_request(name="Walnut Side Table"))

    assert excinfo.value.message == "A product with the same SKU already exists."
    assert len(repository.products) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_business_rule_failure_keeps_reasons_internal():
    repository = _InMemoryRepository(created_today=2)

    with pytest.raises(BusinessRuleError) as excinfo:
        await _handler(repository, daily_limit=2).handle(_request())

    assert str(excinfo.value) == "One or more business rules failed."
    assert excinfo.value.reasons == ["Daily product addition limit of 2 reached."]
    assert repository.products == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_insert_race_surfaces_as_duplicate_key():
    repository = _InMemoryRepository(
        fail_insert=DuplicateKeyError("A product with the same SKU already exists.")
    )
    observer = _RecordingObserver()

    with pytest.raises(DuplicateKeyError):
        await _handler(repository, observer=observer).handle(_request())

    assert observer.metrics[-1].success is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_store_failure_propagates_unchanged():
    repository = _InMemoryRepository(fail_insert=RuntimeError("disk full"))
    observer = _RecordingObserver()

    with pytest.raises(RuntimeError, match="disk full"):
        await _handler(repository, observer=observer).handle(_request())

    assert observer.metrics[-1].error_reason == "disk full"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cache_failure_does_not_fail_creation():
    observer = _RecordingObserver()

    handler = _handler(cache=_RecordingCache(healthy=False), observer=observer)
    profile = await handler.handle(_request())

    assert profile.sku == "BB-TBL-001"
    assert "cache_remove_False" in observer.events


@pytest.mark.unit
@pytest.mark.asyncio
async def test_observer_failures_are_ignored():
    repository = _InMemoryRepository()

    handler = _handler(repository, observer=_RecordingObserver(explode=True))
    profile = await handler.handle(_request())

    assert profile.name == "Oak Side Table"
    assert len(repository.products) == 1
