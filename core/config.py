"""Non-secret settings for notifications and escalation."""

from pydantic import BaseModel, Field

from core.models import ComplaintPriority


class NotificationConfig(BaseModel):
    """How complaint emails are signed and delivered."""

    support_signature: str = Field(
        default="ResolveIt Support Team",
        description="Sign-off on emails sent to complaint filers",
    )
    system_signature: str = Field(
        default="ResolveIt System",
        description="Sign-off on emails sent to staff",
    )
    sender: str = Field(
        default="system",
        description="Sender identity passed to the email gateway",
        pattern="^(auth|system)$",
    )
    max_workers: int = Field(
        default=4,
        description="Background threads delivering email",
        ge=1,
        le=32,
    )


class EscalationConfig(BaseModel):
    """
    SLA thresholds for the auto-escalation sweep.

    A complaint older than the SLA for its priority that is still open
    gets escalated. So does one with a long status history that has been
    open for complex_min_age_hours.
    """

    sla_hours: dict[ComplaintPriority, int] = Field(
        default_factory=lambda: {
            ComplaintPriority.CRITICAL: 2,
            ComplaintPriority.HIGH: 8,
            ComplaintPriority.MEDIUM: 24,
            ComplaintPriority.LOW: 72,
        },
    )
    cooldown_hours: int = Field(
        default=4,
        description="Minimum hours between escalations of the same complaint",
        ge=0,
    )
    complex_history_entries: int = Field(
        default=5,
        description="History entries that mark a complaint as complex",
        ge=1,
    )
    complex_min_age_hours: int = Field(
        default=48,
        description="Age at which a complex complaint is escalated regardless of SLA",
        ge=0,
    )
