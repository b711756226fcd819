"""Event handlers that turn domain events into side effects."""

from .logging_handler import LoggingEventHandler
from .websocket_handler import WebSocketEventHandler

__all__ = ["LoggingEventHandler", "WebSocketEventHandler"]
