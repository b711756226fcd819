"""
WebSocket Event Handlers

Handles Socket.IO connections and pushes the live catalog to browsers.
"""

import logging

from flask import current_app, request

from utransfer.domain.file_registry import FileRegistry

logger = logging.getLogger(__name__)

CATALOG_EVENT = "update"


def register_socketio_events(app):
    """
    Register Socket.IO event handlers on the app's own SocketIO instance.

    Args:
        app: Flask application with ``socketio`` and ``websocket_handler``
    """
    socketio = getattr(app, "socketio", None)

    if socketio is None:
        logger.warning("SocketIO not initialized, skipping event registration")
        return

    @socketio.on("connect")
    def handle_connect():
        """Send the current catalog to the new client."""
        client_id = request.sid
        logger.info(f"Client connected: {client_id}")

        registry = current_app.container.resolve(FileRegistry)
        current_app.websocket_handler.send_catalog_to(client_id, registry.snapshot)

    @socketio.on("disconnect")
    def handle_disconnect(*args):
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid}")

    logger.info("SocketIO event handlers registered")


def emit_catalog_update(socketio, catalog, to=None):
    """
    Emit the catalog to one client or to everyone.

    Args:
        socketio: SocketIO instance to emit through
        catalog: List of PIN-redacted record dicts, in upload order
        to: Client sid; None broadcasts to all connected clients
    """
    try:
        if to is None:
            socketio.emit(CATALOG_EVENT, catalog)
        else:
            socketio.emit(CATALOG_EVENT, catalog, to=to)

        logger.debug(f"Emitted catalog with {len(catalog)} file(s) to {to or 'all clients'}")

    except Exception as e:
        logger.error(f"Failed to emit catalog update: {e}")
