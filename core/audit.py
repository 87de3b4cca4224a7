"""
Status audit trail for complaints.

Every status-affecting operation (create, transition, assign, escalate)
writes exactly one entry here. The trail is:
- Append-only (entries never modified; removed only with their complaint)
- Attributed (who caused the change, or flagged system-generated)
- Ordered (entries come back in the order they were written)
"""

import logging
from datetime import datetime
from typing import Callable
from uuid import UUID, uuid4

from core.models import ComplaintStatus, StatusHistory
from core.repositories.history_repository import StatusHistoryRepository
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Writes and reads complaint status history.

    Usage:
        audit = AuditLogger(StatusHistoryRepository(postgres))

        audit.log_status(
            complaint_id=complaint.id,
            status=ComplaintStatus.SUBMITTED,
            changed_by=filer.id,
            note="Complaint submitted",
        )

        # Newest first
        history = audit.get_complaint_history(complaint.id)
    """

    def __init__(
        self,
        history: StatusHistoryRepository,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.history = history
        self.clock = clock

    def log_status(
        self,
        complaint_id: UUID,
        status: ComplaintStatus,
        changed_by: UUID | None,
        note: str | None,
        system: bool = False,
    ) -> StatusHistory:
        """
        Append one history entry.

        Args:
            complaint_id: Complaint the entry belongs to
            status: Complaint status after the change
            changed_by: User who caused the change; None only when system is True
            note: Free-text description of the change
            system: Entry was written by an automated process

        Raises:
            ValueError: changed_by missing on a user-attributed entry
        """
        if changed_by is None and not system:
            raise ValueError("changed_by is required unless the entry is system-generated")

        entry = StatusHistory(
            id=uuid4(),
            complaint_id=complaint_id,
            status=status,
            changed_by=changed_by,
            note=note,
            created_at=self.clock(),
            is_system_generated=system,
        )

        stored = self.history.append(entry)
        logger.debug(f"Complaint {complaint_id} history: {status.value}")
        return stored

    def get_complaint_history(self, complaint_id: UUID) -> list[StatusHistory]:
        """Full status history for a complaint, newest first."""
        return self.history.list_for_complaint(complaint_id)
