"""
Domain events for the complaint lifecycle.

Immutable event objects published after a lifecycle operation has persisted
its changes and written its history entry. Notification handlers subscribe to
them, so the lifecycle service never talks to the mail gateway directly.

Events carry the stored domain objects so handlers don't need to re-fetch
state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class ComplaintEvent:
    """Base class for all complaint events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)
    complaint: Any = None  # Complaint; Any keeps core.models out of this module


@dataclass(frozen=True, kw_only=True)
class ComplaintSubmitted(ComplaintEvent):
    """A complaint was filed. Filer gets a confirmation."""
    filer: Any = None

    @classmethod
    def create(cls, complaint: Any, filer: Any) -> "ComplaintSubmitted":
        return cls(complaint=complaint, filer=filer)


@dataclass(frozen=True, kw_only=True)
class ComplaintStatusChanged(ComplaintEvent):
    """Staff moved a complaint to a new status."""
    old_status: Any = None
    new_status: Any = None
    changed_by: Any = None

    @classmethod
    def create(cls, complaint: Any, old_status: Any, new_status: Any, changed_by: Any) -> "ComplaintStatusChanged":
        return cls(
            complaint=complaint,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
        )


@dataclass(frozen=True, kw_only=True)
class ComplaintAssigned(ComplaintEvent):
    """A complaint was given to a staff member."""
    assignee: Any = None
    assigned_by: Any = None

    @classmethod
    def create(cls, complaint: Any, assignee: Any, assigned_by: Any) -> "ComplaintAssigned":
        return cls(complaint=complaint, assignee=assignee, assigned_by=assigned_by)


@dataclass(frozen=True, kw_only=True)
class PublicNoteAdded(ComplaintEvent):
    """A note visible to the filer was attached. Internal notes publish nothing."""
    note: Any = None

    @classmethod
    def create(cls, complaint: Any, note: Any) -> "PublicNoteAdded":
        return cls(complaint=complaint, note=note)


@dataclass(frozen=True, kw_only=True)
class ComplaintEscalated(ComplaintEvent):
    """A complaint was escalated, manually or by the SLA sweep."""
    reason: str = ""
    old_priority: Any = None
    escalated_to: Any = None

    @classmethod
    def create(cls, complaint: Any, reason: str, old_priority: Any, escalated_to: Any = None) -> "ComplaintEscalated":
        return cls(
            complaint=complaint,
            reason=reason,
            old_priority=old_priority,
            escalated_to=escalated_to,
        )
