"""Input checks for the book catalog."""

from __future__ import annotations

from catalog_api.models.book import CreateBookRequest, UpdateBookRequest
from catalog_api.models.validation import GENERAL_FIELD, Violation

MIN_YEAR = 1450
MIN_AUTHOR_LENGTH = 3


def _check_year(year: int, current_year: int, violations: list[Violation]) -> None:
    if not MIN_YEAR <= year <= current_year:
        violations.append(
            Violation(field="year", message=f"Year must be between {MIN_YEAR} and {current_year}.")
        )


def _check_author_length(author: str, violations: list[Violation]) -> None:
    if len(author.strip()) < MIN_AUTHOR_LENGTH:
        violations.append(
            Violation(
                field="author",
                message=f"Author must be at least {MIN_AUTHOR_LENGTH} characters.",
            )
        )


def validate_create_book(request: CreateBookRequest, current_year: int) -> list[Violation]:
    violations: list[Violation] = []

    if not request.title or not request.title.strip():
        violations.append(Violation(field="title", message="Title is required."))

    if not request.author or not request.author.strip():
        violations.append(Violation(field="author", message="Author is required."))
    else:
        _check_author_length(request.author, violations)

    if request.year is None:
        violations.append(Violation(field="year", message="Year is required."))
    else:
        _check_year(request.year, current_year, violations)

    return violations


def validate_update_book(request: UpdateBookRequest, current_year: int) -> list[Violation]:
    """Checks only the supplied fields; at least one must be present."""
    if request.title is None and request.author is None and request.year is None:
        return [
            Violation(
                field=GENERAL_FIELD,
                message="At least one of title, author or year must be provided.",
            )
        ]

    violations: list[Violation] = []
    if request.title is not None and not request.title.strip():
        violations.append(Violation(field="title", message="Title cannot be empty."))

    if request.author is not None:
        if not request.author.strip():
            violations.append(Violation(field="author", message="Author cannot be empty."))
        else:
            _check_author_length(request.author, violations)

    if request.year is not None:
        _check_year(request.year, current_year, violations)

    return violations
