"""
Catalog audit log.

Writes one line per catalog change so uploads, deletes and expiries can be
followed in the server log without touching the registry.
"""

import logging

from utransfer.domain.events import CatalogChangedEvent, DomainEvent


class LoggingEventHandler:
    """Logs domain events to the given logger."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        if not isinstance(event, CatalogChangedEvent):
            self.logger.debug(f"{event.__class__.__name__} for {event.aggregate_id}")
            return

        try:
            self.logger.info(
                f"[CATALOG] {event.reason} {len(event.storage_keys)} file(s) "
                f"-> v{event.snapshot.version}, {len(event.snapshot)} live: "
                f"{', '.join(event.storage_keys)}"
            )
        except Exception as e:
            self.logger.error(f"Could not log {event.__class__.__name__}: {e}", exc_info=True)
