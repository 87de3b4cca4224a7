"""
Handlers that turn complaint events into emails.

Each factory captures its dependencies at wiring time via closure and
returns a handler for one event type. Filers are looked up by the
complaint's user_id; a missing filer is logged and the email skipped.
"""

import logging
from typing import Callable

from core.config import NotificationConfig
from core.event_bus import EventBus
from core.events import (
    ComplaintSubmitted, ComplaintStatusChanged, ComplaintAssigned,
    PublicNoteAdded, ComplaintEscalated,
)

logger = logging.getLogger(__name__)


def _ref(complaint) -> str:
    return f"#{complaint.id}"


def _filer(users, complaint):
    filer = users.find_by_id(complaint.user_id)
    if filer is None:
        logger.warning(f"Filer {complaint.user_id} of complaint {complaint.id} not found; email skipped")
    return filer


def handle_complaint_submitted(notifier, config: NotificationConfig) -> Callable:
    """Confirmation to the filer."""

    def handler(event: ComplaintSubmitted):
        complaint, filer = event.complaint, event.filer
        notifier.notify(
            filer.email,
            f"Complaint Submitted Successfully - {_ref(complaint)}",
            f"Dear {filer.first_name},\n\n"
            "Your complaint has been submitted successfully.\n\n"
            f"Complaint ID: {_ref(complaint)}\n"
            f"Title: {complaint.title}\n"
            f"Status: {complaint.status.value}\n"
            f"Priority: {complaint.priority.value}\n\n"
            "You can track your complaint status using the complaint ID.\n\n"
            "Thank you for contacting us.\n\n"
            f"Best regards,\n{config.support_signature}",
        )

    return handler


def handle_status_changed(notifier, users, config: NotificationConfig) -> Callable:
    """Old and new status to the filer."""

    def handler(event: ComplaintStatusChanged):
        complaint = event.complaint
        filer = _filer(users, complaint)
        if filer is None:
            return

        notifier.notify(
            filer.email,
            f"Complaint Status Updated - {_ref(complaint)}",
            f"Dear {filer.first_name},\n\n"
            "Your complaint status has been updated.\n\n"
            f"Complaint ID: {_ref(complaint)}\n"
            f"Title: {complaint.title}\n"
            f"Previous Status: {event.old_status.value}\n"
            f"Current Status: {event.new_status.value}\n\n"
            "You can view more details by logging into your account.\n\n"
            "Thank you for your patience.\n\n"
            f"Best regards,\n{config.support_signature}",
        )

    return handler


def handle_complaint_assigned(notifier, users, config: NotificationConfig) -> Callable:
    """Heads-up to the assignee, not the filer."""

    def handler(event: ComplaintAssigned):
        complaint, assignee = event.complaint, event.assignee
        filer = users.find_by_id(complaint.user_id)
        submitted_by = filer.full_name if filer else "Unknown user"

        notifier.notify(
            assignee.email,
            f"New Complaint Assigned - {_ref(complaint)}",
            f"Dear {assignee.first_name},\n\n"
            "A new complaint has been assigned to you.\n\n"
            f"Complaint ID: {_ref(complaint)}\n"
            f"Title: {complaint.title}\n"
            f"Category: {complaint.category.value}\n"
            f"Priority: {complaint.priority.value}\n"
            f"Submitted by: {submitted_by}\n\n"
            "Please log in to the admin panel to view and manage this complaint.\n\n"
            f"Best regards,\n{config.system_signature}",
        )

    return handler


def handle_public_note_added(notifier, users, config: NotificationConfig) -> Callable:
    """Note text to the filer."""

    def handler(event: PublicNoteAdded):
        complaint = event.complaint
        filer = _filer(users, complaint)
        if filer is None:
            return

        notifier.notify(
            filer.email,
            f"Update on Your Complaint - {_ref(complaint)}",
            f"Dear {filer.first_name},\n\n"
            "There's an update on your complaint.\n\n"
            f"Complaint ID: {_ref(complaint)}\n"
            f"Title: {complaint.title}\n\n"
            f"Update:\n{event.note.note}\n\n"
            "You can view more details by logging into your account.\n\n"
            f"Best regards,\n{config.support_signature}",
        )

    return handler


def handle_complaint_escalated(notifier, users, config: NotificationConfig) -> Callable:
    """Escalation notice to the filer and, when reassigned, the new assignee."""

    def handler(event: ComplaintEscalated):
        complaint = event.complaint
        subject = f"Complaint Escalated - {_ref(complaint)}"

        filer = _filer(users, complaint)
        if filer is not None:
            notifier.notify(
                filer.email,
                subject,
                f"Dear {filer.first_name},\n\n"
                "Your complaint has been escalated for faster resolution.\n\n"
                f"Complaint ID: {_ref(complaint)}\n"
                f"Title: {complaint.title}\n"
                f"Priority: {complaint.priority.value}\n"
                f"Reason: {event.reason}\n\n"
                "Thank you for your patience.\n\n"
                f"Best regards,\n{config.support_signature}",
            )

        if event.escalated_to is not None:
            assignee = event.escalated_to
            notifier.notify(
                assignee.email,
                f"URGENT: {subject}",
                f"Dear {assignee.first_name},\n\n"
                "An escalated complaint has been assigned to you.\n\n"
                f"Complaint ID: {_ref(complaint)}\n"
                f"Title: {complaint.title}\n"
                f"Category: {complaint.category.value}\n"
                f"Priority: {complaint.priority.value}\n"
                f"Escalation Reason: {event.reason}\n\n"
                "Please review this complaint immediately.\n\n"
                f"Best regards,\n{config.system_signature}",
            )

    return handler


def register_notification_handlers(
    event_bus: EventBus,
    notifier,
    users,
    config: NotificationConfig | None = None,
) -> None:
    """Subscribe every notification handler."""
    config = config or NotificationConfig()

    event_bus.subscribe(ComplaintSubmitted, handle_complaint_submitted(notifier, config))
    event_bus.subscribe(ComplaintStatusChanged, handle_status_changed(notifier, users, config))
    event_bus.subscribe(ComplaintAssigned, handle_complaint_assigned(notifier, users, config))
    event_bus.subscribe(PublicNoteAdded, handle_public_note_added(notifier, users, config))
    event_bus.subscribe(ComplaintEscalated, handle_complaint_escalated(notifier, users, config))
