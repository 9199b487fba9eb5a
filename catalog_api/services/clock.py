"""Injectable UTC clock."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a frozen clock."""

    return utcnow
