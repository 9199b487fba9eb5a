"""Translate catalog errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from catalog_api.config import settings
from catalog_api.models.validation import (
    MessageResponse,
    ServerErrorResponse,
    ValidationErrorResponse,
)
from catalog_api.services.errors import (
    BusinessRuleError,
    DuplicateKeyError,
    FieldViolationError,
    InvalidIdentifierError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


async def _field_violations(request: Request, exc: FieldViolationError) -> JSONResponse:
    body = ValidationErrorResponse(errors=exc.violations)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


async def _duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=MessageResponse(message=exc.message).model_dump(),
    )


async def _business_rule(request: Request, exc: BusinessRuleError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=MessageResponse(message=exc.public_message).model_dump(),
    )


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=MessageResponse(message=exc.message).model_dump(),
    )


async def _invalid_identifier(request: Request, exc: InvalidIdentifierError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.message})


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    body = ServerErrorResponse(
        error="An unexpected error occurred.",
        details=None if settings.is_production else str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FieldViolationError, _field_violations)
    app.add_exception_handler(DuplicateKeyError, _duplicate_key)
    app.add_exception_handler(BusinessRuleError, _business_rule)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(InvalidIdentifierError, _invalid_identifier)
    app.add_exception_handler(Exception, _unexpected)
