"""User reference models."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class UserRole(str, Enum):
    """Role of a user in the complaint desk."""

    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.MODERATOR})


class User(BaseModel):
    """A filer, assignee, or staff member."""

    id: UUID
    first_name: str
    last_name: str
    email: str
    role: UserRole = UserRole.USER
    is_active: bool = True

    model_config = {"from_attributes": True}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
