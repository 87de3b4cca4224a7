"""
Complaint persistence.

Complaints are written whole: save() upserts every column, so concurrent
writers to the same row are last-writer-wins.
"""

import logging
from datetime import datetime
from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import (
    Complaint, ComplaintFilter, ComplaintStatus, Page, PageRequest,
    CategoryCount, StatusCount, RESOLVING_STATUSES,
)

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id", "user_id", "assigned_to", "title", "description",
    "category", "priority", "status", "resolution",
    "created_at", "updated_at", "resolved_at",
    "escalated_at", "escalation_reason",
)

# Columns a save may change; id, user_id and created_at are fixed at creation
_MUTABLE_COLUMNS = [c for c in _COLUMNS if c not in ("id", "user_id", "created_at")]

_FILTER_COLUMNS = ("user_id", "assigned_to", "status", "category", "priority")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ComplaintRepository:
    """Keyed storage and listings for complaints."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def save(self, complaint: Complaint) -> Complaint:
        """
        Insert or update a complaint.

        Args:
            complaint: Complaint with its id already assigned

        Returns:
            Complaint as stored
        """
        placeholders = ", ".join(["%s"] * len(_COLUMNS))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in _MUTABLE_COLUMNS)
        values = complaint.model_dump()

        row = self.postgres.execute_returning(
            f"""
            INSERT INTO complaints ({', '.join(_COLUMNS)})
            VALUES ({placeholders})
            ON CONFLICT (id) DO UPDATE SET {updates}
            RETURNING *
            """,
            tuple(values[c] for c in _COLUMNS)
        )[0]

        return Complaint.model_validate(row)

    def find_by_id(self, complaint_id: UUID) -> Complaint | None:
        row = self.postgres.execute_single(
            "SELECT * FROM complaints WHERE id = %s",
            (complaint_id,)
        )

        if row is None:
            return None

        return Complaint.model_validate(row)

    def find_page(self, filter: ComplaintFilter, page: PageRequest) -> Page[Complaint]:
        """
        List complaints matching every set filter field, newest first.

        Args:
            filter: Fields to match; unset fields are ignored
            page: Limit and offset

        Returns:
            Page of complaints with the total match count
        """
        criteria = filter.model_dump(exclude_none=True)
        clauses = [f"{column} = %s" for column in _FILTER_COLUMNS if column in criteria]
        params = [criteria[column] for column in _FILTER_COLUMNS if column in criteria]
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        return self._page(where, params, page)

    def search_by_keyword(self, text: str, page: PageRequest) -> Page[Complaint]:
        """
        Case-insensitive substring search over title and description.

        LIKE wildcards in the keyword are matched literally.
        """
        pattern = f"%{_escape_like(text)}%"
        return self._page(
            "WHERE title ILIKE %s OR description ILIKE %s",
            [pattern, pattern],
            page,
        )

    def _page(self, where: str, params: list, page: PageRequest) -> Page[Complaint]:
        total = self.postgres.execute_scalar(
            f"SELECT COUNT(*) FROM complaints {where}",
            tuple(params)
        )

        rows = self.postgres.execute(
            f"""
            SELECT * FROM complaints
            {where}
            ORDER BY created_at DESC, id
            LIMIT %s OFFSET %s
            """,
            tuple(params + [page.limit, page.offset])
        )

        return Page[Complaint](
            items=[Complaint.model_validate(row) for row in rows],
            total=total or 0,
            limit=page.limit,
            offset=page.offset,
        )

    def find_by_date_range(self, start: datetime, end: datetime) -> list[Complaint]:
        """Complaints created between start and end (inclusive), oldest first."""
        rows = self.postgres.execute(
            """
            SELECT * FROM complaints
            WHERE created_at >= %s AND created_at <= %s
            ORDER BY created_at ASC
            """,
            (start, end)
        )

        return [Complaint.model_validate(row) for row in rows]

    def find_open(self) -> list[Complaint]:
        """Complaints not yet resolved or closed, oldest first."""
        rows = self.postgres.execute(
            """
            SELECT * FROM complaints
            WHERE status <> ALL(%s)
            ORDER BY created_at ASC
            """,
            ([s.value for s in RESOLVING_STATUSES],)
        )

        return [Complaint.model_validate(row) for row in rows]

    def count_by_status(self, status: ComplaintStatus) -> int:
        return self.postgres.execute_scalar(
            "SELECT COUNT(*) FROM complaints WHERE status = %s",
            (status,)
        ) or 0

    def count_open_assigned(self, user_id: UUID) -> int:
        """Open complaints currently assigned to a user (their workload)."""
        return self.postgres.execute_scalar(
            """
            SELECT COUNT(*) FROM complaints
            WHERE assigned_to = %s AND status <> ALL(%s)
            """,
            (user_id, [s.value for s in RESOLVING_STATUSES])
        ) or 0

    def group_count_by_category(self) -> list[CategoryCount]:
        rows = self.postgres.execute(
            """
            SELECT category, COUNT(*) AS count
            FROM complaints
            GROUP BY category
            ORDER BY category
            """
        )

        return [CategoryCount.model_validate(row) for row in rows]

    def group_count_by_status(self) -> list[StatusCount]:
        rows = self.postgres.execute(
            """
            SELECT status, COUNT(*) AS count
            FROM complaints
            GROUP BY status
            ORDER BY status
            """
        )

        return [StatusCount.model_validate(row) for row in rows]

    def delete_by_id(self, complaint_id: UUID) -> bool:
        """
        Hard delete a complaint row. Its history and notes go with it
        through ON DELETE CASCADE, in the same statement.

        Returns:
            True if a row was removed
        """
        rows = self.postgres.execute_returning(
            "DELETE FROM complaints WHERE id = %s RETURNING id",
            (complaint_id,)
        )
        return bool(rows)
