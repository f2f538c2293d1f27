"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body rendered for every domain error."""

    detail: str = Field(..., description="Short, non-technical message")
    reason: str = Field(..., description="Machine-readable failure reason")
    retryable: bool = Field(False, description="True if the same call may simply be retried")


class BulkIds(BaseModel):
    """A selection of entity ids from an admin table."""

    ids: list[str] = Field(..., min_length=1, description="Entity ids to act on")


class CountResponse(BaseModel):
    count: int
