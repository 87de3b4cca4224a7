"""Internal note persistence."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import InternalNote


class InternalNoteRepository:
    """Storage for staff notes on complaints."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def save(self, note: InternalNote) -> InternalNote:
        row = self.postgres.execute_returning(
            """
            INSERT INTO internal_notes (
                id, complaint_id, note, created_by, is_public, created_at
            ) VALUES (
                %s, %s, %s, %s, %s, %s
            )
            RETURNING *
            """,
            (
                note.id, note.complaint_id, note.note,
                note.created_by, note.is_public, note.created_at
            )
        )[0]

        return InternalNote.model_validate(row)

    def list_for_complaint(self, complaint_id: UUID, public_only: bool = False) -> list[InternalNote]:
        """
        Notes on one complaint, newest first.

        Args:
            complaint_id: Complaint UUID
            public_only: Only return notes the filer may see
        """
        query = "SELECT * FROM internal_notes WHERE complaint_id = %s"
        if public_only:
            query += " AND is_public"
        query += " ORDER BY created_at DESC, seq DESC"

        rows = self.postgres.execute(query, (complaint_id,))
        return [InternalNote.model_validate(row) for row in rows]
