"""Complaint domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ComplaintCategory(str, Enum):
    """What the complaint is about."""

    TECHNICAL = "TECHNICAL"
    BILLING = "BILLING"
    SERVICE = "SERVICE"
    GENERAL = "GENERAL"
    URGENT = "URGENT"


class ComplaintPriority(str, Enum):
    """How quickly the complaint needs attention."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ComplaintStatus(str, Enum):
    """Complaint lifecycle status."""

    SUBMITTED = "SUBMITTED"
    IN_PROGRESS = "IN_PROGRESS"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    ESCALATED = "ESCALATED"


# Entering either of these stamps resolved_at
RESOLVING_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})


class ComplaintCreate(BaseModel):
    """
    Data submitted by a user filing a complaint.

    status is accepted so drafts round-trip from clients, but it is
    ignored on create: every new complaint starts SUBMITTED.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    category: ComplaintCategory
    priority: ComplaintPriority = ComplaintPriority.MEDIUM
    status: ComplaintStatus | None = None

    @field_validator("title", "description")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class Complaint(BaseModel):
    """Full complaint entity as stored."""

    id: UUID
    user_id: UUID
    assigned_to: UUID | None = None
    title: str = Field(..., max_length=200)
    description: str = Field(..., max_length=2000)
    category: ComplaintCategory
    priority: ComplaintPriority = ComplaintPriority.MEDIUM
    status: ComplaintStatus = ComplaintStatus.SUBMITTED
    resolution: str | None = Field(None, max_length=1000)
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    escalated_at: datetime | None = None
    escalation_reason: str | None = None

    model_config = {"from_attributes": True}

    @property
    def is_open(self) -> bool:
        """Whether the complaint still needs work."""
        return self.status not in RESOLVING_STATUSES


class CategoryCount(BaseModel):
    category: ComplaintCategory
    count: int


class StatusCount(BaseModel):
    status: ComplaintStatus
    count: int
