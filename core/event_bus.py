"""
Synchronous in-process dispatch of complaint events.

Handlers run in the publisher's thread, in subscription order, after the
operation's complaint write and history entry are stored. A failing handler
is logged and skipped; it never fails the operation.
"""

import logging
from typing import Callable, Dict, List, Type

from core.events import ComplaintEvent

logger = logging.getLogger(__name__)

Handler = Callable[[ComplaintEvent], None]


class EventBus:
    """
    Routes each event to the handlers subscribed to its exact class.

    Usage:
        bus = EventBus()
        bus.subscribe(ComplaintAssigned, notify_assignee)
        bus.publish(ComplaintAssigned.create(complaint, assignee, actor))
    """

    def __init__(self):
        self._handlers: Dict[Type[ComplaintEvent], List[Handler]] = {}

    def subscribe(self, event_type: Type[ComplaintEvent], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: Type[ComplaintEvent]) -> List[Handler]:
        """Handlers registered for an event class, in call order."""
        return list(self._handlers.get(event_type, ()))

    def publish(self, event: ComplaintEvent) -> None:
        """
        Call every handler for the event's class.

        Subclasses are not matched against their parents' subscriptions.
        """
        for handler in self._handlers.get(type(event), ()):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(handler, "__name__", repr(handler)),
                    type(event).__name__,
                    event.event_id,
                )
