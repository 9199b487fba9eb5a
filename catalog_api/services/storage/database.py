"""SQLAlchemy engine, session factory and declarative base."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import DateTime, Engine, create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.types import TypeDecorator

from catalog_api.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """Stores naive UTC and hands back aware UTC datetimes on every backend."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class Database:
    """Owns the engine and hands out short-lived sessions."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def session(self) -> Session:
        return self._session_factory()

    def create_schema(self) -> None:
        # Entities must be imported so their tables are registered on Base.
        from catalog_api.services.storage import entities  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("Database schema ensured", extra={"url": self.engine.url.render_as_string()})

    def ping(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def dispose(self) -> None:
        self.engine.dispose()


def create_database(url: str | None = None, **engine_kwargs) -> Database:
    """Factory function to create a database handle."""
    database_url = url or settings.DATABASE_URL
    if database_url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(database_url, echo=settings.DATABASE_ECHO, **engine_kwargs)
    return Database(engine)


_database: Database | None = None


def get_database() -> Database:
    """Return a singleton database handle for the current process."""

    global _database
    if _database is None:
        _database = create_database()
    return _database
