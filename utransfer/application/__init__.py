"""Application services for the relay."""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .transfer_service import TransferService

__all__ = [
    "DependencyContainer",
    "DependencyNotFoundError",
    "EventPublisher",
    "TransferService",
]
