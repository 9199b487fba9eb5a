"""Logging setup shared by the API and the service layer."""

from __future__ import annotations

import logging
from contextvars import ContextVar

CORRELATION_ID_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="-")

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def get_correlation_id() -> str:
    return _correlation_id.get()


def bind_correlation_id(value: str):
    """Bind the id for the current context and return the reset token."""
    return _correlation_id.set(value)


def reset_correlation_id(token) -> None:
    _correlation_id.reset(token)


def configure_logging(level: str) -> None:
    """Configure the root logger and stamp every record with the correlation id."""

    base_factory = logging.getLogRecordFactory()
    if not getattr(base_factory, "_stamps_correlation_id", False):

        def record_factory(*args, **kwargs) -> logging.LogRecord:
            record = base_factory(*args, **kwargs)
            record.correlation_id = _correlation_id.get()
            return record

        record_factory._stamps_correlation_id = True  # type: ignore[attr-defined]
        logging.setLogRecordFactory(record_factory)

    logging.basicConfig(level=level, format=_LOG_FORMAT)
