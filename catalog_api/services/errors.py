"""Error kinds raised by the catalog services and translated by the API layer."""

from __future__ import annotations

from collections.abc import Sequence

from catalog_api.models.validation import Violation


class CatalogError(Exception):
    """Base class for expected, client-facing catalog failures."""


class FieldViolationError(CatalogError):
    """One or more validation rules rejected the input."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations))


class DuplicateKeyError(CatalogError):
    """A uniqueness constraint (SKU or name+brand) would be broken."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BusinessRuleError(CatalogError):
    """Aggregate business rules failed. Reasons are for logs only."""

    public_message = "One or more business rules failed."

    def __init__(self, reasons: Sequence[str]) -> None:
        self.reasons = list(reasons)
        super().__init__(self.public_message)


class NotFoundError(CatalogError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidIdentifierError(CatalogError):
    message = "Invalid or missing Id."

    def __init__(self) -> None:
        super().__init__(self.message)
