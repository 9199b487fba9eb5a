"""HTTP middleware."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

from catalog_api.logging_utils import (
    CORRELATION_ID_HEADER,
    bind_correlation_id,
    reset_correlation_id,
)

logger = logging.getLogger(__name__)


async def correlation_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind the caller's correlation id (or a fresh one) for the request's logs."""

    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or uuid.uuid4().hex
    token = bind_correlation_id(correlation_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        logger.debug(
            "%s %s -> %d in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
    finally:
        reset_correlation_id(token)


def register_middleware(app: FastAPI) -> None:
    app.middleware("http")(correlation_id_middleware)
