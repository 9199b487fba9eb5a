"""Redis-backed TTL cache for catalog list reads."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

import redis.asyncio as redis
from fastapi import Depends

from catalog_api.config import settings

logger = logging.getLogger(__name__)

ALL_PRODUCTS_KEY = "all_products"
ALL_BOOKS_KEY = "all_books"

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


class CatalogCache:
    """Passive JSON cache: get, set with a TTL, invalidate by key."""

    def __init__(self, client: redis.Redis, *, prefix: str, ttl_seconds: int) -> None:
        self._client = client
        self._prefix = prefix
        self._ttl = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await self._client.set(
            self._key(key),
            json.dumps(value),
            ex=ttl_seconds or self._ttl,
        )

    async def invalidate(self, key: str) -> None:
        await self._client.delete(self._key(key))

    async def try_get(self, key: str) -> Any | None:
        """Like :meth:`get`, but a cache outage reads as a miss."""
        try:
            return await self.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s, falling back to store: %s", key, exc)
            return None

    async def try_set(self, key: str, value: Any) -> bool:
        try:
            await self.set(key, value)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return False
        return True

    async def try_invalidate(self, key: str) -> bool:
        """Remove ``key``; failures are logged since the entry expires anyway."""
        try:
            await self.invalidate(key)
        except Exception as exc:
            logger.warning("Cache invalidation failed for %s: %s", key, exc)
            return False
        return True

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception:
            logger.warning("Cache ping failed", exc_info=True)
            return False


def get_catalog_cache(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> CatalogCache:
    """FastAPI dependency factory."""

    return CatalogCache(
        client,
        prefix=settings.CACHE_KEY_PREFIX,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )


CacheDependency = Annotated[CatalogCache, Depends(get_catalog_cache)]
