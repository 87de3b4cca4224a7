"""
SLA sweep that escalates stale complaints.

Each open complaint has an SLA by priority. Once a complaint is older than
its SLA it is escalated one priority step and handed to the least-loaded
staff member. A complaint open for two days that has changed status many
times is treated as complex and raised further. A complaint escalated
within the cooldown window is left alone so the sweep can run often
without re-escalating the same rows.

Nothing schedules the sweep; run check() from cron or a worker.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from core.config import EscalationConfig
from core.models import Complaint, ComplaintPriority, User, UserRole
from core.repositories import ComplaintRepository, UserRepository
from core.services.complaint_service import ComplaintService
from utils.timezone import now_utc, hours_between

logger = logging.getLogger(__name__)

_NEXT_PRIORITY = {
    ComplaintPriority.LOW: ComplaintPriority.MEDIUM,
    ComplaintPriority.MEDIUM: ComplaintPriority.HIGH,
    ComplaintPriority.HIGH: ComplaintPriority.CRITICAL,
    ComplaintPriority.CRITICAL: ComplaintPriority.CRITICAL,
}

# Lower sorts first when workloads tie
_ROLE_ORDER = {UserRole.ADMIN: 0, UserRole.MODERATOR: 1}


@dataclass(frozen=True)
class EscalationRun:
    """Outcome of one sweep."""
    processed: int
    escalated: int
    checked_at: datetime


class EscalationService:
    """Finds complaints past their SLA and escalates them."""

    def __init__(
        self,
        complaints: ComplaintRepository,
        users: UserRepository,
        complaint_service: ComplaintService,
        config: EscalationConfig | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.complaints = complaints
        self.users = users
        self.complaint_service = complaint_service
        self.config = config or EscalationConfig()
        self.clock = clock

    def breach_reason(self, complaint: Complaint, now: datetime) -> str | None:
        """
        Why a complaint should be escalated, or None if it is within SLA.

        Args:
            complaint: Open complaint
            now: Time to measure age against
        """
        sla = self.config.sla_hours[complaint.priority]
        age = hours_between(complaint.created_at, now)
        if age < sla:
            return None
        return (
            f"{complaint.priority.value} priority complaint unresolved for "
            f"{age} hours (SLA: {sla} hours)"
        )

    def complexity_reason(self, complaint: Complaint, history_entries: int, now: datetime) -> str | None:
        """
        Why a long-running complaint with many status changes should be
        escalated, or None.

        Args:
            complaint: Open complaint
            history_entries: Number of status history entries it has
            now: Time to measure age against
        """
        age = hours_between(complaint.created_at, now)
        if history_entries < self.config.complex_history_entries or age < self.config.complex_min_age_hours:
            return None
        return f"Complex complaint with {history_entries} status changes over {age} hours"

    def decide(self, complaint: Complaint, now: datetime) -> tuple[str, ComplaintPriority] | None:
        """
        Reason and new priority for escalating a complaint, or None.

        The complexity rule wins over the SLA rule and raises LOW straight
        to HIGH, anything else to CRITICAL.
        """
        decision = None

        reason = self.breach_reason(complaint, now)
        if reason is not None:
            decision = (reason, _NEXT_PRIORITY[complaint.priority])

        # History is only read once the complaint is old enough to qualify
        if hours_between(complaint.created_at, now) >= self.config.complex_min_age_hours:
            history = self.complaint_service.get_history(complaint.id)
            reason = self.complexity_reason(complaint, len(history), now)
            if reason is not None:
                priority = (
                    ComplaintPriority.HIGH if complaint.priority == ComplaintPriority.LOW
                    else ComplaintPriority.CRITICAL
                )
                decision = (reason, priority)

        return decision

    def candidates(self, now: datetime) -> list[Complaint]:
        """Open complaints not escalated within the cooldown window."""
        cutoff = now - timedelta(hours=self.config.cooldown_hours)
        return [
            c for c in self.complaints.find_open()
            if c.escalated_at is None or c.escalated_at < cutoff
        ]

    def pick_assignee(self) -> User | None:
        """Active staff member with the fewest open assigned complaints."""
        staff = self.users.list_staff()
        if not staff:
            return None

        workloads = [
            (self.complaints.count_open_assigned(member.id), _ROLE_ORDER.get(member.role, 99), index)
            for index, member in enumerate(staff)
        ]
        return staff[min(workloads)[2]]

    def check(self, now: datetime | None = None) -> EscalationRun:
        """
        Run one sweep.

        A failure escalating one complaint is logged and the sweep moves on.

        Returns:
            How many complaints were examined and escalated
        """
        now = now or self.clock()
        candidates = self.candidates(now)
        escalated = 0

        for complaint in candidates:
            try:
                decision = self.decide(complaint, now)
                if decision is None:
                    continue

                reason, new_priority = decision
                self.complaint_service.escalate(
                    complaint.id,
                    reason=f"AUTO-ESCALATED: {reason}",
                    new_priority=new_priority,
                    escalate_to=self.pick_assignee(),
                )
            except Exception:
                logger.exception(f"Auto-escalation failed for complaint {complaint.id}")
                continue

            escalated += 1

        logger.info(f"Escalation sweep: {escalated} of {len(candidates)} complaints escalated")
        return EscalationRun(processed=len(candidates), escalated=escalated, checked_at=now)
