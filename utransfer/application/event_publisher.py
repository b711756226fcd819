"""
In-process event bus.

The file registry publishes catalog changes here; the Socket.IO broadcaster
and the audit log subscribe. Publishing never fails because of a subscriber.
"""

import logging
import threading
from typing import Callable, Dict, List, Type

from utransfer.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventPublisher:
    """
    Synchronous publish/subscribe for domain events.

    A subscriber registered for a base class (``DomainEvent``) receives
    every subclass as well. Subscribers run on the publishing thread, in
    subscription order, most specific type first.
    """

    def __init__(self):
        self._subscribers: Dict[Type[DomainEvent], List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """
        Call ``handler(event)`` for each published ``event_type`` (or subclass).

        Example:
            publisher.subscribe(CatalogChangedEvent, ws_handler.handle_catalog_changed)
        """
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"{_handler_name(handler)} subscribed to {event_type.__name__}")

    def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every matching subscriber, logging their failures."""
        event_name = type(event).__name__
        with self._lock:
            targets = [
                handler
                for cls in type(event).__mro__
                for handler in self._subscribers.get(cls, ())
            ]

        if not targets:
            logger.debug(f"{event_name}: no subscribers")
            return

        for handler in targets:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Subscriber {_handler_name(handler)} failed on {event_name}: {e}",
                    exc_info=True,
                )
