"""System-level routes such as health checks."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from catalog_api.config import settings
from catalog_api.services.cache.catalog_cache import CacheDependency
from catalog_api.services.storage.database import Database, get_database

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Hello World endpoint used by smoke tests."""

    return {"message": "Hello World"}


@router.get("/health")
async def health_check(
    database: Annotated[Database, Depends(get_database)],
    cache: CacheDependency,
) -> dict[str, str]:
    """Health check with store and cache connectivity."""

    database_ok = await asyncio.to_thread(database.ping)
    cache_ok = await cache.ping()

    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected",
        "cache": "connected" if cache_ok else "disconnected",
        "environment": settings.ENVIRONMENT,
    }
