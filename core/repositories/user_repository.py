"""User lookups. Users are managed elsewhere; this side only reads them."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import User, STAFF_ROLES


class UserRepository:
    """Read-only access to users referenced by complaints."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def find_by_id(self, user_id: UUID) -> User | None:
        row = self.postgres.execute_single(
            "SELECT * FROM users WHERE id = %s",
            (user_id,)
        )
        return User.model_validate(row) if row else None

    def list_staff(self) -> list[User]:
        """Active admins and moderators."""
        rows = self.postgres.execute(
            """
            SELECT * FROM users
            WHERE role = ANY(%s) AND is_active
            ORDER BY last_name, first_name
            """,
            ([r.value for r in STAFF_ROLES],)
        )
        return [User.model_validate(row) for row in rows]
