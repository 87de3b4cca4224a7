"""UTC time helpers. Every timestamp the complaint desk stores is UTC."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    This is the default clock handed to services; tests pass their own.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert an aware datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def hours_between(start: datetime, end: datetime) -> int:
    """Whole hours elapsed from start to end, floored. Negative if end is earlier."""
    return int((to_utc(end) - to_utc(start)).total_seconds() // 3600)
