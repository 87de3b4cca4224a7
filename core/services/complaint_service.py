"""
Complaint lifecycle service.

Handles the full complaint lifecycle: file, change status, assign, annotate,
escalate, delete. Every mutating operation follows the same order:

1. Look the complaint up (missing id -> ComplaintNotFoundError, nothing written)
2. Persist the complaint
3. Append one status history entry reflecting the post-change state
4. Publish a domain event; notification handlers react to it

Step 4 never fails the operation: the event bus logs handler errors and the
notifier delivers in the background.

There is no status transition matrix: any status may follow any
other.
"""

import logging
from datetime import datetime
from typing import Callable
from uuid import UUID, uuid4

from core.audit import AuditLogger
from core.event_bus import EventBus
from core.events import (
    ComplaintSubmitted, ComplaintStatusChanged, ComplaintAssigned,
    PublicNoteAdded, ComplaintEscalated,
)
from core.exceptions import ComplaintNotFoundError
from core.models import (
    Complaint, ComplaintCreate, ComplaintStatus, ComplaintCategory, ComplaintPriority,
    ComplaintFilter, Page, PageRequest, CategoryCount, StatusCount,
    InternalNote, InternalNoteCreate, StatusHistory, User, RESOLVING_STATUSES,
)
from core.repositories import ComplaintRepository, InternalNoteRepository
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class ComplaintService:
    """Service for complaint lifecycle operations."""

    def __init__(
        self,
        complaints: ComplaintRepository,
        audit: AuditLogger,
        notes: InternalNoteRepository,
        event_bus: EventBus,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.complaints = complaints
        self.audit = audit
        self.notes = notes
        self.event_bus = event_bus
        self.clock = clock

    def _require(self, complaint_id: UUID) -> Complaint:
        complaint = self.complaints.find_by_id(complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(complaint_id)
        return complaint

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create(self, data: ComplaintCreate, filer: User) -> Complaint:
        """
        File a new complaint.

        Args:
            data: Complaint draft; any status on it is ignored
            filer: User filing the complaint

        Returns:
            Stored complaint in SUBMITTED status
        """
        now = self.clock()
        complaint = self.complaints.save(Complaint(
            id=uuid4(),
            user_id=filer.id,
            title=data.title,
            description=data.description,
            category=data.category,
            priority=data.priority,
            status=ComplaintStatus.SUBMITTED,
            created_at=now,
            updated_at=now,
        ))

        self.audit.log_status(
            complaint_id=complaint.id,
            status=ComplaintStatus.SUBMITTED,
            changed_by=filer.id,
            note="Complaint submitted",
        )

        logger.info(f"Complaint {complaint.id} submitted by {filer.id}")
        self.event_bus.publish(ComplaintSubmitted.create(complaint, filer))

        return complaint

    def transition_status(
        self,
        complaint_id: UUID,
        new_status: ComplaintStatus,
        actor: User,
        note: str | None = None,
    ) -> Complaint:
        """
        Move a complaint to any status.

        Entering RESOLVED or CLOSED stamps resolved_at, overwriting any
        earlier stamp.

        Raises:
            ComplaintNotFoundError: If complaint not found
        """
        current = self._require(complaint_id)
        old_status = current.status
        now = self.clock()

        changes = {"status": new_status, "updated_at": now}
        if new_status in RESOLVING_STATUSES:
            changes["resolved_at"] = now

        updated = self.complaints.save(current.model_copy(update=changes))

        self.audit.log_status(
            complaint_id=complaint_id,
            status=new_status,
            changed_by=actor.id,
            note=note,
        )

        logger.info(
            f"Complaint {complaint_id} status {old_status.value} -> {new_status.value} by {actor.id}"
        )
        self.event_bus.publish(
            ComplaintStatusChanged.create(updated, old_status, new_status, actor)
        )

        return updated

    def assign(self, complaint_id: UUID, assignee: User, actor: User) -> Complaint:
        """
        Hand a complaint to a staff member.

        A SUBMITTED complaint moves to IN_PROGRESS as part of the assignment;
        any other status is kept.

        Raises:
            ComplaintNotFoundError: If complaint not found
        """
        current = self._require(complaint_id)

        changes = {"assigned_to": assignee.id, "updated_at": self.clock()}
        if current.status == ComplaintStatus.SUBMITTED:
            changes["status"] = ComplaintStatus.IN_PROGRESS

        updated = self.complaints.save(current.model_copy(update=changes))

        self.audit.log_status(
            complaint_id=complaint_id,
            status=updated.status,
            changed_by=actor.id,
            note=f"Complaint assigned to {assignee.first_name} {assignee.last_name}",
        )

        logger.info(f"Complaint {complaint_id} assigned to {assignee.id} by {actor.id}")
        self.event_bus.publish(ComplaintAssigned.create(updated, assignee, actor))

        return updated

    def add_note(self, complaint_id: UUID, data: InternalNoteCreate, author: User) -> InternalNote:
        """
        Attach a note. Public notes are emailed to the filer.

        Raises:
            ComplaintNotFoundError: If complaint not found
        """
        complaint = self._require(complaint_id)

        note = self.notes.save(InternalNote(
            id=uuid4(),
            complaint_id=complaint_id,
            note=data.note,
            created_by=author.id,
            is_public=data.is_public,
            created_at=self.clock(),
        ))

        if note.is_public:
            self.event_bus.publish(PublicNoteAdded.create(complaint, note))

        return note

    def escalate(
        self,
        complaint_id: UUID,
        reason: str,
        new_priority: ComplaintPriority | None = None,
        escalate_to: User | None = None,
        actor: User | None = None,
    ) -> Complaint:
        """
        Escalate a complaint.

        Args:
            complaint_id: Complaint UUID
            reason: Why it is being escalated
            new_priority: Priority to raise to; current priority kept if None
            escalate_to: Staff member to reassign to; assignee kept if None
            actor: User escalating; None marks the history entry system-generated

        Raises:
            ComplaintNotFoundError: If complaint not found
        """
        current = self._require(complaint_id)
        now = self.clock()
        old_priority = current.priority
        priority = new_priority or current.priority

        changes = {
            "status": ComplaintStatus.ESCALATED,
            "priority": priority,
            "escalated_at": now,
            "escalation_reason": reason,
            "updated_at": now,
        }
        if escalate_to is not None:
            changes["assigned_to"] = escalate_to.id

        updated = self.complaints.save(current.model_copy(update=changes))

        note = f"Escalated: {reason}."
        if priority != old_priority:
            note += f" Priority changed from {old_priority.value} to {priority.value}."
        self.audit.log_status(
            complaint_id=complaint_id,
            status=ComplaintStatus.ESCALATED,
            changed_by=actor.id if actor else None,
            note=note,
            system=actor is None,
        )

        logger.info(f"Complaint {complaint_id} escalated: {reason}")
        self.event_bus.publish(
            ComplaintEscalated.create(updated, reason, old_priority, escalate_to)
        )

        return updated

    def delete(self, complaint_id: UUID) -> bool:
        """
        Hard delete a complaint with its notes and history.

        One statement: the store removes notes and history with the
        complaint row (ON DELETE CASCADE), so a failure leaves all three.

        Returns:
            True if deleted, False if not found
        """
        deleted = self.complaints.delete_by_id(complaint_id)
        if deleted:
            logger.info(f"Complaint {complaint_id} deleted")
        return deleted

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, complaint_id: UUID) -> Complaint | None:
        return self.complaints.find_by_id(complaint_id)

    def list_complaints(
        self,
        filter: ComplaintFilter | None = None,
        page: PageRequest | None = None,
    ) -> Page[Complaint]:
        """List complaints matching a filter, newest first."""
        return self.complaints.find_page(filter or ComplaintFilter(), page or PageRequest())

    def list_for_user(self, user_id: UUID, page: PageRequest | None = None) -> Page[Complaint]:
        return self.list_complaints(ComplaintFilter(user_id=user_id), page)

    def list_assigned_to(self, user_id: UUID, page: PageRequest | None = None) -> Page[Complaint]:
        return self.list_complaints(ComplaintFilter(assigned_to=user_id), page)

    def list_by_status(self, status: ComplaintStatus, page: PageRequest | None = None) -> Page[Complaint]:
        return self.list_complaints(ComplaintFilter(status=status), page)

    def list_by_category(self, category: ComplaintCategory, page: PageRequest | None = None) -> Page[Complaint]:
        return self.list_complaints(ComplaintFilter(category=category), page)

    def list_by_priority(self, priority: ComplaintPriority, page: PageRequest | None = None) -> Page[Complaint]:
        return self.list_complaints(ComplaintFilter(priority=priority), page)

    def search(self, keyword: str, page: PageRequest | None = None) -> Page[Complaint]:
        """Case-insensitive substring search over title and description."""
        return self.complaints.search_by_keyword(keyword, page or PageRequest())

    def list_by_date_range(self, start: datetime, end: datetime) -> list[Complaint]:
        """Complaints created between start and end, inclusive."""
        return self.complaints.find_by_date_range(start, end)

    def count_by_status(self, status: ComplaintStatus) -> int:
        return self.complaints.count_by_status(status)

    def counts_by_category(self) -> list[CategoryCount]:
        return self.complaints.group_count_by_category()

    def counts_by_status(self) -> list[StatusCount]:
        return self.complaints.group_count_by_status()

    def get_history(self, complaint_id: UUID) -> list[StatusHistory]:
        """Status history, newest first."""
        return self.audit.get_complaint_history(complaint_id)

    def get_notes(self, complaint_id: UUID, public_only: bool = False) -> list[InternalNote]:
        """Notes on a complaint, newest first."""
        return self.notes.list_for_complaint(complaint_id, public_only=public_only)
