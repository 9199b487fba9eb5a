"""Store access for products."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from catalog_api.services.errors import DuplicateKeyError
from catalog_api.services.storage.database import Database, get_database
from catalog_api.services.storage.entities import Product
from catalog_api.services.storage.repository import SqlRepository

DUPLICATE_SKU_MESSAGE = "A product with the same SKU already exists."
DUPLICATE_NAME_MESSAGE = "A product with the same name already exists for this brand."


class ProductRepository(SqlRepository[Product]):
    model = Product

    async def sku_exists(self, sku: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        criteria = [Product.sku == sku]
        if exclude_id is not None:
            criteria.append(Product.id != exclude_id)
        return await self.exists(*criteria)

    async def name_brand_exists(
        self,
        name: str,
        brand: str,
        *,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        criteria = [Product.name == name, Product.brand == brand]
        if exclude_id is not None:
            criteria.append(Product.id != exclude_id)
        return await self.exists(*criteria)

    async def count_created_since(self, since: datetime) -> int:
        return await self.count(Product.created_at >= since)

    async def list_all(self) -> list[Product]:
        return await asyncio.to_thread(self._list_all)

    def _list_all(self) -> list[Product]:
        stmt = select(Product).order_by(Product.created_at.desc())
        with self._database.session() as session:
            return list(session.scalars(stmt))

    def _translate_integrity_error(self, exc: IntegrityError) -> Exception:
        # SQLite reports "products.sku", Postgres reports the index name.
        detail = str(exc.orig).lower()
        if "sku" in detail:
            return DuplicateKeyError(DUPLICATE_SKU_MESSAGE)
        if "name" in detail or "brand" in detail:
            return DuplicateKeyError(DUPLICATE_NAME_MESSAGE)
        return exc


def get_product_repository(
    database: Annotated[Database, Depends(get_database)],
) -> ProductRepository:
    return ProductRepository(database)
