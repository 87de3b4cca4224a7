"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, hours_between
