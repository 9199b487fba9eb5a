"""Store access for books, including the paged/filter/sort query."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import Depends
from sqlalchemy import Select, func, select

from catalog_api.services.storage.database import Database, get_database
from catalog_api.services.storage.entities import Book
from catalog_api.services.storage.repository import SqlRepository

_SORT_COLUMNS = {
    "title": Book.title,
    "year": Book.year,
}


class BookRepository(SqlRepository[Book]):
    model = Book

    async def list_all(self) -> list[Book]:
        return await asyncio.to_thread(self._list_all)

    async def page(
        self,
        *,
        page: int,
        page_size: int,
        author: str | None = None,
        author_contains: str | None = None,
        sort_by: str | None = None,
        desc: bool = False,
    ) -> tuple[list[Book], int]:
        """Return one page of books and the total match count."""
        return await asyncio.to_thread(
            self._page, page, page_size, author, author_contains, sort_by, desc
        )

    def _list_all(self) -> list[Book]:
        with self._database.session() as session:
            return list(session.scalars(select(Book).order_by(Book.id)))

    def _page(
        self,
        page: int,
        page_size: int,
        author: str | None,
        author_contains: str | None,
        sort_by: str | None,
        desc: bool,
    ) -> tuple[list[Book], int]:
        query = _filtered(select(Book), author, author_contains)
        count_query = _filtered(select(func.count()).select_from(Book), author, author_contains)

        column = _SORT_COLUMNS.get((sort_by or "").strip().lower(), Book.id)
        query = query.order_by(column.desc() if desc else column.asc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        with self._database.session() as session:
            total = int(session.scalar(count_query) or 0)
            items = list(session.scalars(query))
        return items, total


def _filtered(query: Select, author: str | None, author_contains: str | None) -> Select:
    # exact author match wins over the substring filter
    if author and author.strip():
        return query.where(func.lower(Book.author) == author.lower())
    if author_contains and author_contains.strip():
        return query.where(func.lower(Book.author).contains(author_contains.lower(), autoescape=True))
    return query


def get_book_repository(
    database: Annotated[Database, Depends(get_database)],
) -> BookRepository:
    return BookRepository(database)
