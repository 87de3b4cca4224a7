"""Pagination and filtering models for complaint listings."""

from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.complaint import ComplaintCategory, ComplaintPriority, ComplaintStatus

T = TypeVar("T")


class PageRequest(BaseModel):
    """Which slice of a listing to return."""

    limit: int = Field(50, ge=1, le=500)
    offset: int = Field(0, ge=0)


class Page(BaseModel, Generic[T]):
    """One page of results plus the total match count."""

    items: list[T]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


class ComplaintFilter(BaseModel):
    """Listing filter. Every field that is set must match."""

    user_id: UUID | None = None
    assigned_to: UUID | None = None
    status: ComplaintStatus | None = None
    category: ComplaintCategory | None = None
    priority: ComplaintPriority | None = None
