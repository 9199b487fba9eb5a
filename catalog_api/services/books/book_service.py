"""Book catalog operations."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from catalog_api.config import settings
from catalog_api.models.book import (
    BookResponse,
    CreateBookRequest,
    PagedBooks,
    UpdateBookRequest,
)
from catalog_api.services.books.validation import validate_create_book, validate_update_book
from catalog_api.services.cache.catalog_cache import ALL_BOOKS_KEY, CacheDependency, CatalogCache
from catalog_api.services.clock import Clock, get_clock
from catalog_api.services.errors import (
    FieldViolationError,
    InvalidIdentifierError,
    NotFoundError,
)
from catalog_api.services.storage.book_repository import BookRepository, get_book_repository
from catalog_api.services.storage.entities import Book

logger = logging.getLogger(__name__)


def clamp_paging(page: int | None, page_size: int | None) -> tuple[int, int]:
    """Normalize paging input: page >= 1, page size within the configured bounds."""
    page = max(1, page or 1)
    if page_size is None:
        page_size = settings.BOOKS_DEFAULT_PAGE_SIZE
    page_size = min(max(1, page_size), settings.BOOKS_MAX_PAGE_SIZE)
    return page, page_size


class BookService:
    def __init__(self, *, repository: BookRepository, cache: CatalogCache, clock: Clock) -> None:
        self._repository = repository
        self._cache = cache
        self._clock = clock

    async def create_book(self, request: CreateBookRequest) -> BookResponse:
        violations = validate_create_book(request, self._clock().year)
        if violations:
            raise FieldViolationError(violations)

        book = Book(
            title=request.title.strip(),
            author=request.author.strip(),
            year=request.year,
        )
        book = await self._repository.insert(book)
        await self._cache.try_invalidate(ALL_BOOKS_KEY)
        logger.info("Book %s created", book.id, extra={"book_id": book.id})
        return BookResponse.model_validate(book)

    async def get_book(self, book_id: int) -> BookResponse:
        return BookResponse.model_validate(await self._require(book_id))

    async def list_books(self) -> list[BookResponse]:
        cached = await self._cache.try_get(ALL_BOOKS_KEY)
        if cached is not None:
            return [BookResponse.model_validate(item) for item in cached]

        books = [BookResponse.model_validate(b) for b in await self._repository.list_all()]
        await self._cache.try_set(ALL_BOOKS_KEY, [b.model_dump() for b in books])
        return books

    async def list_page(
        self,
        *,
        page: int | None = None,
        page_size: int | None = None,
        author: str | None = None,
        author_contains: str | None = None,
        sort_by: str | None = None,
        desc: bool = False,
    ) -> PagedBooks:
        page, page_size = clamp_paging(page, page_size)
        items, total = await self._repository.page(
            page=page,
            page_size=page_size,
            author=author,
            author_contains=author_contains,
            sort_by=sort_by,
            desc=desc,
        )
        return PagedBooks(
            items=[BookResponse.model_validate(b) for b in items],
            total_count=total,
            page=page,
            page_size=page_size,
        )

    async def update_book(self, book_id: int, request: UpdateBookRequest) -> BookResponse:
        book = await self._require(book_id)
        violations = validate_update_book(request, self._clock().year)
        if violations:
            raise FieldViolationError(violations)

        if request.title is not None:
            book.title = request.title.strip()
        if request.author is not None:
            book.author = request.author.strip()
        if request.year is not None:
            book.year = request.year

        book = await self._repository.update(book)
        await self._cache.try_invalidate(ALL_BOOKS_KEY)
        logger.info("Book %s updated", book.id)
        return BookResponse.model_validate(book)

    async def delete_book(self, book_id: int) -> None:
        book = await self._require(book_id)
        await self._repository.delete(book)
        await self._cache.try_invalidate(ALL_BOOKS_KEY)
        logger.info("Book %s deleted", book_id)

    async def _require(self, book_id: int) -> Book:
        if book_id <= 0:
            raise InvalidIdentifierError()
        book = await self._repository.get(book_id)
        if book is None:
            raise NotFoundError(f"Book with id {book_id} not found.")
        return book


def get_book_service(
    repository: Annotated[BookRepository, Depends(get_book_repository)],
    cache: CacheDependency,
    clock: Annotated[Clock, Depends(get_clock)],
) -> BookService:
    return BookService(repository=repository, cache=cache, clock=clock)
