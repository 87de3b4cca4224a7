"""Shared test fixtures for the complaint desk test suite."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import UUID

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from core.models import (
    Complaint, ComplaintFilter, Page, PageRequest, CategoryCount, StatusCount,
    User, UserRole, STAFF_ROLES, RESOLVING_STATUSES,
)


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

FILER_ID = UUID("00000000-0000-0000-0000-000000000001")
STAFF_A_ID = UUID("00000000-0000-0000-0000-0000000000a1")
STAFF_B_ID = UUID("00000000-0000-0000-0000-0000000000b1")

START_TIME = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# CLOCK
# =============================================================================


class FixedClock:
    """Deterministic clock; call advance() to move time forward."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


# =============================================================================
# IN-MEMORY STORES - same methods as core.repositories, no DB needed
# =============================================================================


class InMemoryComplaintRepository:
    """Deleting a complaint cascades to the history and note stores it was given."""

    def __init__(self, history=None, notes=None):
        self.rows: dict[UUID, Complaint] = {}
        self.save_count = 0
        self.history = history
        self.notes = notes

    def save(self, complaint):
        self.save_count += 1
        self.rows[complaint.id] = complaint.model_copy()
        return complaint.model_copy()

    def find_by_id(self, complaint_id):
        row = self.rows.get(complaint_id)
        return row.model_copy() if row else None

    def _paginate(self, matches, page):
        matches = sorted(matches, key=lambda c: c.created_at, reverse=True)
        return Page[Complaint](
            items=matches[page.offset:page.offset + page.limit],
            total=len(matches),
            limit=page.limit,
            offset=page.offset,
        )

    def find_page(self, filter: ComplaintFilter, page: PageRequest):
        criteria = filter.model_dump(exclude_none=True)
        matches = [
            c for c in self.rows.values()
            if all(getattr(c, field) == value for field, value in criteria.items())
        ]
        return self._paginate(matches, page)

    def search_by_keyword(self, text, page):
        needle = text.lower()
        matches = [
            c for c in self.rows.values()
            if needle in c.title.lower() or needle in c.description.lower()
        ]
        return self._paginate(matches, page)

    def find_by_date_range(self, start, end):
        return sorted(
            (c for c in self.rows.values() if start <= c.created_at <= end),
            key=lambda c: c.created_at,
        )

    def find_open(self):
        return sorted(
            (c for c in self.rows.values() if c.status not in RESOLVING_STATUSES),
            key=lambda c: c.created_at,
        )

    def count_by_status(self, status):
        return sum(1 for c in self.rows.values() if c.status == status)

    def count_open_assigned(self, user_id):
        return sum(
            1 for c in self.rows.values()
            if c.assigned_to == user_id and c.status not in RESOLVING_STATUSES
        )

    def group_count_by_category(self):
        counts = {}
        for c in self.rows.values():
            counts[c.category] = counts.get(c.category, 0) + 1
        return [CategoryCount(category=k, count=v) for k, v in sorted(counts.items())]

    def group_count_by_status(self):
        counts = {}
        for c in self.rows.values():
            counts[c.status] = counts.get(c.status, 0) + 1
        return [StatusCount(status=k, count=v) for k, v in sorted(counts.items())]

    def delete_by_id(self, complaint_id):
        if self.rows.pop(complaint_id, None) is None:
            return False
        if self.history is not None:
            self.history.entries = [e for e in self.history.entries if e.complaint_id != complaint_id]
        if self.notes is not None:
            self.notes.notes = [n for n in self.notes.notes if n.complaint_id != complaint_id]
        return True


class InMemoryHistoryRepository:

    def __init__(self):
        self.entries = []

    def append(self, entry):
        self.entries.append(entry)
        return entry

    def list_for_complaint(self, complaint_id):
        return [e for e in reversed(self.entries) if e.complaint_id == complaint_id]

    def chronological(self, complaint_id):
        """Oldest-first statuses for one complaint."""
        return [e.status for e in self.entries if e.complaint_id == complaint_id]


class InMemoryNoteRepository:

    def __init__(self):
        self.notes = []

    def save(self, note):
        self.notes.append(note)
        return note

    def list_for_complaint(self, complaint_id, public_only=False):
        return [
            n for n in reversed(self.notes)
            if n.complaint_id == complaint_id and (n.is_public or not public_only)
        ]


class InMemoryUserRepository:

    def __init__(self, users=()):
        self.users = {u.id: u for u in users}

    def add(self, user):
        self.users[user.id] = user
        return user

    def find_by_id(self, user_id):
        return self.users.get(user_id)

    def list_staff(self):
        return sorted(
            (u for u in self.users.values() if u.role in STAFF_ROLES and u.is_active),
            key=lambda u: (u.last_name, u.first_name),
        )


class RecordingNotifier:
    """Stands in for core.notifier.Notifier; keeps every notify() call."""

    def __init__(self):
        self.sent = []

    def notify(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})
        return None

    def to(self, address):
        return [m for m in self.sent if m["to"] == address]


# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest.fixture
def filer() -> User:
    return User(
        id=FILER_ID, first_name="Dana", last_name="Filer",
        email="dana.filer@test.local", role=UserRole.USER,
    )


@pytest.fixture
def staff_a() -> User:
    return User(
        id=STAFF_A_ID, first_name="Alex", last_name="Admin",
        email="alex.admin@test.local", role=UserRole.ADMIN,
    )


@pytest.fixture
def staff_b() -> User:
    return User(
        id=STAFF_B_ID, first_name="Morgan", last_name="Moderator",
        email="morgan.mod@test.local", role=UserRole.MODERATOR,
    )


# =============================================================================
# SERVICE FIXTURES (in-memory)
# =============================================================================


@pytest.fixture
def complaint_repo(history_repo, note_repo):
    return InMemoryComplaintRepository(history_repo, note_repo)


@pytest.fixture
def history_repo():
    return InMemoryHistoryRepository()


@pytest.fixture
def note_repo():
    return InMemoryNoteRepository()


@pytest.fixture
def user_repo(filer, staff_a, staff_b):
    return InMemoryUserRepository([filer, staff_a, staff_b])


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def event_bus(notifier, user_repo):
    """EventBus with the notification handlers wired to the recording notifier."""
    from core.event_bus import EventBus
    from core.handlers.notification_handlers import register_notification_handlers

    bus = EventBus()
    register_notification_handlers(bus, notifier, user_repo)
    return bus


@pytest.fixture
def audit(history_repo, clock):
    from core.audit import AuditLogger
    return AuditLogger(history_repo, clock=clock)


@pytest.fixture
def complaint_service(complaint_repo, audit, note_repo, event_bus, clock):
    from core.services.complaint_service import ComplaintService
    return ComplaintService(complaint_repo, audit, note_repo, event_bus, clock=clock)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def db():
    """
    Session-scoped PostgresClient with schema.sql applied.

    URL comes from TEST_DATABASE_URL or Vault; skipped when neither works.
    """
    import psycopg2
    from clients.postgres_client import PostgresClient
    from clients.vault_client import get_database_url

    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        try:
            url = get_database_url()
        except (ValueError, PermissionError, KeyError) as e:
            pytest.skip(f"No database configured: {e}")

    try:
        client = PostgresClient(url)
    except psycopg2.OperationalError as e:
        pytest.skip(f"Database unreachable: {e}")

    client.apply_schema(Path(__file__).parent.parent / "schema.sql")

    yield client
    client.close()


@pytest.fixture
def clean_db(db, filer, staff_a, staff_b):
    """Empty complaint tables and seed the test users."""
    db.execute("TRUNCATE internal_notes, status_history, complaints, users CASCADE")

    for user in (filer, staff_a, staff_b):
        db.execute(
            """
            INSERT INTO users (id, first_name, last_name, email, role, is_active)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (user.id, user.first_name, user.last_name, user.email, user.role, user.is_active)
        )

    yield db
