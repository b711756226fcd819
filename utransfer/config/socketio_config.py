"""
SocketIO Configuration

Configures Flask-SocketIO for pushing the live catalog to browsers.
"""

import logging

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)


def init_socketio(app, async_mode: str = "threading", cors_allowed_origins="*") -> SocketIO:
    """
    Create the Socket.IO server bound to one app.

    Each app gets its own instance; the catalog lives in this process, so
    no message queue is configured.

    Args:
        app: Flask application instance
        async_mode: Flask-SocketIO async mode
        cors_allowed_origins: Allowed origins for the WebSocket handshake

    Returns:
        SocketIO instance
    """
    try:
        socketio = SocketIO(
            app,
            cors_allowed_origins=cors_allowed_origins,
            async_mode=async_mode,
            logger=False,
            engineio_logger=False,
            ping_timeout=60,
            ping_interval=25,
        )
    except Exception as e:
        logger.error(f"Failed to initialize SocketIO: {e}")
        raise

    logger.info(f"SocketIO initialized (async_mode={async_mode})")
    return socketio
