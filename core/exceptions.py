"""Typed exceptions for complaint lifecycle failures."""

from uuid import UUID


class ComplaintError(Exception):
    """Base class for complaint domain errors."""


class NotFoundError(ComplaintError, ValueError):
    """
    A mutating operation referenced an id with nothing behind it.

    Subclasses ValueError so callers that map "not found" ValueErrors to
    404 keep working.
    """


class ComplaintNotFoundError(NotFoundError):
    """No complaint with the given id."""

    def __init__(self, complaint_id: UUID):
        self.complaint_id = complaint_id
        super().__init__(f"Complaint {complaint_id} not found")


class UserNotFoundError(NotFoundError):
    """No user with the given id."""

    def __init__(self, user_id: UUID):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")
