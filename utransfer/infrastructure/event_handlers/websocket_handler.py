"""
WebSocket Event Handler

Translates catalog-changed domain events into Socket.IO broadcasts.
"""

import logging
import threading
from typing import Callable, Optional

from utransfer.api.websocket_events import emit_catalog_update
from utransfer.domain.events import CatalogChangedEvent
from utransfer.domain.file_registry.entities import CatalogSnapshot

logger = logging.getLogger(__name__)


class WebSocketEventHandler:
    """
    Event handler that pushes catalog snapshots to connected clients.

    Snapshots carry the registry's version. Every emission happens under
    one lock and never goes below the highest version already broadcast,
    so each client sees catalog states in order even when events are
    published from several threads or a client connects mid-broadcast.
    """

    def __init__(self, socketio):
        """
        Args:
            socketio: The app's SocketIO instance
        """
        self._socketio = socketio
        self._lock = threading.Lock()
        self._last_snapshot: Optional[CatalogSnapshot] = None

    @property
    def last_version(self) -> int:
        """Version of the last broadcast catalog, -1 before the first one."""
        snapshot = self._last_snapshot
        return snapshot.version if snapshot is not None else -1

    def handle_catalog_changed(self, event: CatalogChangedEvent) -> None:
        """
        Handle CatalogChangedEvent by broadcasting the snapshot.

        Args:
            event: CatalogChangedEvent carrying the post-mutation snapshot
        """
        snapshot = event.snapshot
        try:
            with self._lock:
                if snapshot.version <= self.last_version:
                    logger.debug(
                        f"Dropping stale catalog v{snapshot.version} "
                        f"(already sent v{self.last_version})"
                    )
                    return
                self._broadcast_locked(snapshot)

        except Exception as e:
            logger.error(
                f"Error broadcasting catalog v{snapshot.version} ({event.reason}): {e}",
                exc_info=True,
            )

    def send_catalog_to(self, client_id: str, snapshot_provider: Callable[[], CatalogSnapshot]) -> None:
        """
        Bring a newly connected client up to date.

        The client gets the last broadcast catalog. If the registry is
        already ahead of it (its events are still on their way), the newer
        catalog is broadcast to everyone instead, and the pending older
        events are dropped when they arrive.

        Args:
            client_id: Socket.IO session id
            snapshot_provider: Callable returning the registry's current snapshot
        """
        try:
            with self._lock:
                current = snapshot_provider()
                if current.version > self.last_version:
                    self._broadcast_locked(current)
                else:
                    emit_catalog_update(
                        self._socketio, self._last_snapshot.to_public_list(), to=client_id
                    )
        except Exception as e:
            logger.error(f"Error sending catalog to client {client_id}: {e}", exc_info=True)

    def _broadcast_locked(self, snapshot: CatalogSnapshot) -> None:
        self._last_snapshot = snapshot
        emit_catalog_update(self._socketio, snapshot.to_public_list())
