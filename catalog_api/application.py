"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_api.api.errors import register_exception_handlers
from catalog_api.api.middleware import register_middleware
from catalog_api.api.routes import include_api_routes
from catalog_api.config import settings
from catalog_api.services.storage.database import get_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    database = get_database()
    try:
        database.create_schema()
    except Exception:
        logger.exception("Failed to create the database schema on startup")
        raise

    yield

    database.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Catalog API",
        description="Book and product catalog service",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    register_middleware(app)
    register_exception_handlers(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
