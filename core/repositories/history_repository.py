"""Status history persistence. Rows are only ever inserted; they leave with their complaint."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import StatusHistory


class StatusHistoryRepository:
    """Append-only storage for complaint status history."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def append(self, entry: StatusHistory) -> StatusHistory:
        row = self.postgres.execute_returning(
            """
            INSERT INTO status_history (
                id, complaint_id, status, changed_by,
                note, is_system_generated, created_at
            ) VALUES (
                %s, %s, %s, %s,
                %s, %s, %s
            )
            RETURNING *
            """,
            (
                entry.id, entry.complaint_id, entry.status, entry.changed_by,
                entry.note, entry.is_system_generated, entry.created_at
            )
        )[0]

        return StatusHistory.model_validate(row)

    def list_for_complaint(self, complaint_id: UUID) -> list[StatusHistory]:
        """
        History for one complaint, newest first.

        seq breaks ties between entries written within the same instant.
        """
        rows = self.postgres.execute(
            """
            SELECT * FROM status_history
            WHERE complaint_id = %s
            ORDER BY created_at DESC, seq DESC
            """,
            (complaint_id,)
        )

        return [StatusHistory.model_validate(row) for row in rows]
