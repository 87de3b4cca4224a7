"""Core domain models."""

from core.models.complaint import (
    Complaint, ComplaintCreate, ComplaintCategory, ComplaintPriority, ComplaintStatus,
    CategoryCount, StatusCount, RESOLVING_STATUSES,
)
from core.models.history import StatusHistory
from core.models.note import InternalNote, InternalNoteCreate
from core.models.user import User, UserRole, STAFF_ROLES
from core.models.page import Page, PageRequest, ComplaintFilter

__all__ = [
    # Complaint
    "Complaint", "ComplaintCreate", "ComplaintCategory", "ComplaintPriority", "ComplaintStatus",
    "CategoryCount", "StatusCount", "RESOLVING_STATUSES",
    # StatusHistory
    "StatusHistory",
    # InternalNote
    "InternalNote", "InternalNoteCreate",
    # User
    "User", "UserRole", "STAFF_ROLES",
    # Paging
    "Page", "PageRequest", "ComplaintFilter",
]
