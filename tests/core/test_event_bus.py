"""Tests for EventBus."""

import logging
from uuid import uuid4

import pytest

from core.event_bus import EventBus
from core.events import ComplaintSubmitted, ComplaintStatusChanged
from core.models import Complaint, ComplaintCategory, ComplaintStatus
from utils.timezone import now_utc


# =============================================================================
# FIXTURES - lightweight in-memory stubs, no DB needed
# =============================================================================


@pytest.fixture
def _complaint(filer):
    now = now_utc()
    return Complaint(
        id=uuid4(), user_id=filer.id,
        title="Router drops connection", description="Every evening around 8pm.",
        category=ComplaintCategory.TECHNICAL,
        created_at=now, updated_at=now,
    )


# =============================================================================
# SUBSCRIBE AND PUBLISH
# =============================================================================


class TestSubscribeAndPublish:

    def test_single_handler_receives_the_exact_event_object(self, _complaint, filer):
        bus = EventBus()
        received = []
        bus.subscribe(ComplaintSubmitted, received.append)

        event = ComplaintSubmitted.create(_complaint, filer)
        bus.publish(event)

        assert len(received) == 1
        assert received[0] is event

    def test_handlers_run_in_subscription_order(self, _complaint, filer):
        bus = EventBus()
        order = []
        bus.subscribe(ComplaintSubmitted, lambda e: order.append("first"))
        bus.subscribe(ComplaintSubmitted, lambda e: order.append("second"))

        bus.publish(ComplaintSubmitted.create(_complaint, filer))

        assert order == ["first", "second"]

    def test_only_matching_type_is_delivered(self, _complaint, filer, staff_a):
        bus = EventBus()
        received = []
        bus.subscribe(ComplaintStatusChanged, received.append)

        bus.publish(ComplaintSubmitted.create(_complaint, filer))
        bus.publish(ComplaintStatusChanged.create(
            _complaint, ComplaintStatus.SUBMITTED, ComplaintStatus.IN_PROGRESS, staff_a
        ))

        assert [type(e).__name__ for e in received] == ["ComplaintStatusChanged"]

    def test_handlers_for_returns_a_copy(self):
        bus = EventBus()
        bus.subscribe(ComplaintSubmitted, print)

        bus.handlers_for(ComplaintSubmitted).clear()

        assert bus.handlers_for(ComplaintSubmitted) == [print]
        assert bus.handlers_for(ComplaintStatusChanged) == []

    def test_publish_without_subscribers_is_noop(self, _complaint, filer):
        EventBus().publish(ComplaintSubmitted.create(_complaint, filer))


# =============================================================================
# ERROR ISOLATION
# =============================================================================


class TestErrorIsolation:

    def test_failing_handler_does_not_stop_the_next(self, _complaint, filer):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("gateway down")

        bus.subscribe(ComplaintSubmitted, broken)
        bus.subscribe(ComplaintSubmitted, received.append)

        bus.publish(ComplaintSubmitted.create(_complaint, filer))

        assert len(received) == 1

    def test_failure_is_logged_with_event_id(self, _complaint, filer, caplog):
        bus = EventBus()

        def broken(event):
            raise RuntimeError("gateway down")

        bus.subscribe(ComplaintSubmitted, broken)
        event = ComplaintSubmitted.create(_complaint, filer)

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            bus.publish(event)

        assert "broken" in caplog.text
        assert event.event_id in caplog.text
        assert "gateway down" in caplog.text
