"""Book catalog schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateBookRequest(BaseModel):
    title: str | None = None
    author: str | None = None
    year: int | None = None


class UpdateBookRequest(BaseModel):
    """Partial update; ``None`` means "leave unchanged"."""

    title: str | None = None
    author: str | None = None
    year: int | None = None


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    year: int


class PagedBooks(BaseModel):
    """A page of books plus the total number of matches before paging."""

    items: list[BookResponse] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
