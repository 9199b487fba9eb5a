"""Generic SQLAlchemy repository exposed through an async interface."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError

from catalog_api.services.storage.database import Base, Database

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Base)


class SqlRepository(Generic[EntityT]):
    """Basic store operations for one entity type.

    Blocking ORM calls run in a worker thread, one short session per call.
    Integrity errors are handed to :meth:`_translate_integrity_error` so
    subclasses can map constraint names to domain errors.
    """

    model: type[EntityT]

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get(self, entity_id: Any) -> EntityT | None:
        return await asyncio.to_thread(self._get, entity_id)

    async def insert(self, entity: EntityT) -> EntityT:
        return await asyncio.to_thread(self._write, entity)

    async def update(self, entity: EntityT) -> EntityT:
        return await asyncio.to_thread(self._write, entity)

    async def delete(self, entity: EntityT) -> None:
        await asyncio.to_thread(self._delete, entity)

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        return await asyncio.to_thread(self._exists, criteria)

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        return await asyncio.to_thread(self._count, criteria)

    def _get(self, entity_id: Any) -> EntityT | None:
        with self._database.session() as session:
            return session.get(self.model, entity_id)

    def _write(self, entity: EntityT) -> EntityT:
        with self._database.session() as session:
            merged = session.merge(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise self._translate_integrity_error(exc) from exc
            session.refresh(merged)
            return merged

    def _delete(self, entity: EntityT) -> None:
        with self._database.session() as session:
            persistent = session.merge(entity)
            session.delete(persistent)
            session.commit()

    def _exists(self, criteria: Sequence[ColumnElement[bool]]) -> bool:
        stmt = select(self.model).where(*criteria).limit(1)
        with self._database.session() as session:
            return session.scalars(stmt).first() is not None

    def _count(self, criteria: Sequence[ColumnElement[bool]]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        with self._database.session() as session:
            return int(session.scalar(stmt) or 0)

    def _translate_integrity_error(self, exc: IntegrityError) -> Exception:
        return exc
