"""Internal note models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class InternalNoteCreate(BaseModel):
    """Data required to annotate a complaint."""

    note: str = Field(..., min_length=1, max_length=1000)
    is_public: bool = False

    @field_validator("note")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class InternalNote(BaseModel):
    """Full note entity as stored."""

    id: UUID
    complaint_id: UUID
    note: str
    created_by: UUID
    is_public: bool
    created_at: datetime

    model_config = {"from_attributes": True}
