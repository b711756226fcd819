"""
Service container for one application instance.

``create_app`` builds a fresh container per app, so two apps (or two tests)
never share a registry or an upload directory.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(LookupError):
    """No service is registered under the requested type."""


class DependencyContainer:
    """Maps a type to the shared instance that serves it."""

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """Share ``implementation`` for every lookup of ``interface``."""
        with self._lock:
            self._services[interface] = implementation
        logger.debug(f"{interface.__name__} -> {type(implementation).__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Look up the service for ``interface``.

        Raises:
            DependencyNotFoundError: Nothing is registered for it
        """
        with self._lock:
            try:
                return self._services[interface]
            except KeyError:
                raise DependencyNotFoundError(
                    f"Nothing registered for {interface.__name__}"
                ) from None
