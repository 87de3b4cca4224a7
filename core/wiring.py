"""
Assemble the complaint desk from its parts.

Connection details come from Vault unless passed in explicitly.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict

from clients.email_client import EmailGatewayClient
from clients.postgres_client import PostgresClient
from clients.vault_client import get_database_url, get_email_config
from core.audit import AuditLogger
from core.config import EscalationConfig, NotificationConfig
from core.event_bus import EventBus
from core.handlers.notification_handlers import register_notification_handlers
from core.notifier import Notifier
from core.repositories import (
    ComplaintRepository, StatusHistoryRepository, InternalNoteRepository, UserRepository,
)
from core.services.complaint_service import ComplaintService
from core.services.escalation_service import EscalationService
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


def create_services(
    database_url: str | None = None,
    email_config: Dict[str, str] | None = None,
    notification_config: NotificationConfig | None = None,
    escalation_config: EscalationConfig | None = None,
    clock: Callable[[], datetime] = now_utc,
) -> Dict[str, Any]:
    """
    Build repositories, services, and notification wiring.

    Args:
        database_url: PostgreSQL URL; read from Vault if None
        email_config: gateway_url, api_key, hmac_secret; read from Vault if None
        notification_config: Email signatures and pool size
        escalation_config: SLA thresholds
        clock: Current-time source shared by every service

    Returns:
        Dict with keys: complaint, escalation, users, notifier, event_bus
    """
    notification_config = notification_config or NotificationConfig()

    postgres = PostgresClient(database_url or get_database_url())
    complaints = ComplaintRepository(postgres)
    users = UserRepository(postgres)

    notifier = Notifier(
        EmailGatewayClient(**(email_config or get_email_config())),
        max_workers=notification_config.max_workers,
        sender=notification_config.sender,
    )

    event_bus = EventBus()
    register_notification_handlers(event_bus, notifier, users, notification_config)

    complaint_service = ComplaintService(
        complaints,
        AuditLogger(StatusHistoryRepository(postgres), clock=clock),
        InternalNoteRepository(postgres),
        event_bus,
        clock=clock,
    )

    logger.info("Complaint services ready")

    return {
        "complaint": complaint_service,
        "escalation": EscalationService(
            complaints, users, complaint_service, escalation_config, clock=clock
        ),
        "users": users,
        "notifier": notifier,
        "event_bus": event_bus,
    }
