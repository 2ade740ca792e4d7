"""
Synchronous in-process event bus.

Handlers run in the publisher's thread after the primary write has
committed. A failing handler is logged and skipped; it never undoes or
fails the operation that published the event.
"""

import logging
from typing import Callable, Dict, List

from core.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class EventBus:
    """Subscribe by event class name, publish event instances."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, event_type: str, callback: Handler) -> None:
        """
        Register `callback` for events whose class is named `event_type`
        (e.g. 'InvoiceCreated'). Handlers run in registration order.
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def handlers_for(self, event_type: str) -> List[Handler]:
        return list(self._subscribers.get(event_type, []))

    def publish(self, event: DomainEvent) -> None:
        event_type = type(event).__name__
        for callback in self._subscribers.get(event_type, []):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )
