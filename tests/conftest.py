"""Pytest configuration and fixtures for the catalog service."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from catalog_api.services.cache.catalog_cache import CatalogCache, get_redis_client
from catalog_api.services.clock import get_clock
from catalog_api.services.storage.database import create_database, get_database

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


def _product_payload(**overrides) -> dict:
    payload = {
        "name": "Merino Crew Sweater",
        "brand": "Northwind Apparel",
        "sku": "NW-SWT-001",
        "category": "Clothing",
        "price": "79.90",
        "release_date": (NOW - timedelta(days=90)).isoformat(),
        "image_url": "https://cdn.example.com/sweater.jpg",
        "stock_quantity": 12,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def product_payload():
    """Factory for a Clothing product that passes every rule at ``NOW``."""
    return _product_payload


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def database():
    """Fresh in-memory SQLite store shared across threads for one test."""
    db = create_database("sqlite://", poolclass=StaticPool)
    db.create_schema()
    try:
        yield db
    finally:
        db.dispose()


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture()
def cache(redis_client):
    return CatalogCache(redis_client, prefix="test:", ttl_seconds=300)


@pytest.fixture()
def frozen_clock():
    return lambda: NOW


@pytest_asyncio.fixture()
async def client(database, redis_client, frozen_clock):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from catalog_api.main import app

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    app.dependency_overrides[get_clock] = lambda: frozen_clock
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_database, None)
        app.dependency_overrides.pop(get_redis_client, None)
        app.dependency_overrides.pop(get_clock, None)
