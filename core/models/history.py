"""Status history (complaint audit trail) models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from core.models.complaint import ComplaintStatus


class StatusHistory(BaseModel):
    """
    One immutable entry in a complaint's status history.

    changed_by is None only for system-generated entries
    (auto-escalation).
    """

    id: UUID
    complaint_id: UUID
    status: ComplaintStatus
    changed_by: UUID | None
    note: str | None
    created_at: datetime
    is_system_generated: bool = False

    model_config = {"from_attributes": True, "frozen": True}
