"""Shared schemas for validation failures and error envelopes."""

from __future__ import annotations

from pydantic import BaseModel, Field

GENERAL_FIELD = "general"


class Violation(BaseModel):
    """A single rule failure bound to a request field (or ``general``)."""

    field: str = Field(..., description="Request field name, or 'general' for cross-field rules")
    message: str


class ValidationErrorResponse(BaseModel):
    """Body returned when a request is rejected by field rules."""

    errors: list[Violation] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class ServerErrorResponse(BaseModel):
    error: str
    details: str | None = None
