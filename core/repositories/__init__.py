"""PostgreSQL-backed data store for complaints and their child records."""

from core.repositories.complaint_repository import ComplaintRepository
from core.repositories.history_repository import StatusHistoryRepository
from core.repositories.note_repository import InternalNoteRepository
from core.repositories.user_repository import UserRepository
