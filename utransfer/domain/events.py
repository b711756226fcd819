"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (WebSocket notifications, logging) from the
file registry.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Tuple

if TYPE_CHECKING:
    from .file_registry.entities import CatalogSnapshot

CATALOG_AGGREGATE_ID = "catalog"


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event
        occurred_at: Timestamp when the event occurred
    """

    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class CatalogChangedEvent(DomainEvent):
    """
    Event emitted after every successful catalog mutation.

    Attributes:
        aggregate_id: Always ``catalog``
        occurred_at: When the mutation was applied
        reason: ``registered``, ``deleted`` or ``expired``
        storage_keys: Keys of the records added or removed
        snapshot: Catalog state right after the mutation
    """

    reason: str
    storage_keys: Tuple[str, ...]
    snapshot: "CatalogSnapshot"

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "reason": self.reason,
            "storage_keys": list(self.storage_keys),
            "version": self.snapshot.version,
            "catalog_size": len(self.snapshot),
        })
        return base_dict
