"""Routes for the book catalog."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from catalog_api.models.book import BookResponse, CreateBookRequest, PagedBooks, UpdateBookRequest
from catalog_api.models.validation import MessageResponse, ValidationErrorResponse
from catalog_api.services.books.book_service import BookService, get_book_service

router = APIRouter(prefix="/books", tags=["books"])

BookServiceDependency = Annotated[BookService, Depends(get_book_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=BookResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse}},
)
async def create_book(
    payload: CreateBookRequest,
    response: Response,
    books: BookServiceDependency,
) -> BookResponse:
    book = await books.create_book(payload)
    response.headers["Location"] = f"/books/{book.id}"
    return book


@router.get("/all", response_model=list[BookResponse], summary="List every book")
async def list_all_books(books: BookServiceDependency) -> list[BookResponse]:
    """Unpaged listing, served from the cache while it is warm."""

    return await books.list_books()


@router.get("", response_model=PagedBooks, summary="Page through books")
async def list_books(
    books: BookServiceDependency,
    page: int = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
    author: str | None = None,
    author_contains: Annotated[str | None, Query(alias="authorContains")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    desc: bool = False,
) -> PagedBooks:
    """Filter by exact author (wins) or author substring, sort by title/year/id."""

    return await books.list_page(
        page=page,
        page_size=page_size,
        author=author,
        author_contains=author_contains,
        sort_by=sort_by,
        desc=desc,
    )


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def get_book(book_id: int, books: BookServiceDependency) -> BookResponse:
    return await books.get_book(book_id)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": MessageResponse},
    },
)
async def update_book(
    book_id: int,
    payload: UpdateBookRequest,
    books: BookServiceDependency,
) -> BookResponse:
    return await books.update_book(book_id, payload)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: int, books: BookServiceDependency) -> Response:
    await books.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
