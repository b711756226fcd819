"""
File Registry Services

The in-memory catalog of uploaded files and its lifecycle rules.
"""

import logging
import threading
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set

from ..errors import ForbiddenError, InvalidInputError, RecordNotFoundError
from ..events import CATALOG_AGGREGATE_ID, CatalogChangedEvent
from .entities import DEFAULT_TTL, CatalogSnapshot, FileRecord, utcnow
from .value_objects import StorageKey

logger = logging.getLogger(__name__)

MAX_KEY_ATTEMPTS = 16


class FileRegistry:
    """
    Owns the catalog of live file records.

    All reads and mutations go through one lock, so the catalog is never
    observed half-updated. Catalog-changed events are published after the
    lock is released; each carries the snapshot taken inside the lock and
    a version number that orders them.

    The registry never touches blob storage. Callers delete blobs for the
    records returned by ``authorize_and_remove`` and ``sweep_expired``.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        event_publisher=None,
        clock: Callable[[], datetime] = utcnow,
        key_factory: Callable[[str], StorageKey] = StorageKey.generate,
    ):
        """
        Initialize an empty registry.

        Args:
            ttl: Lifetime of each record
            event_publisher: Optional EventPublisher for CatalogChangedEvent
            clock: Source of the current time
            key_factory: Storage key generator, takes the original name
        """
        self.ttl = ttl
        self._event_publisher = event_publisher
        self._clock = clock
        self._key_factory = key_factory
        self._records: "OrderedDict[str, FileRecord]" = OrderedDict()
        self._reserved: Set[str] = set()
        self._version = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Storage keys
    # ------------------------------------------------------------------

    def reserve_storage_key(self, original_name: str) -> str:
        """
        Allocate a unique storage key without making a record visible.

        Used by uploads that write the blob before registering it.

        Raises:
            InvalidInputError: If the name is empty
        """
        _require_name(original_name)
        with self._lock:
            key = self._new_key_locked(original_name)
            self._reserved.add(key)
        return key

    def release_storage_key(self, storage_key: str) -> None:
        """Drop a reservation; no-op if the key is not reserved."""
        with self._lock:
            self._reserved.discard(storage_key)

    def is_known(self, storage_key: str) -> bool:
        """True if the key belongs to a live record or an open reservation."""
        with self._lock:
            return storage_key in self._records or storage_key in self._reserved

    def _new_key_locked(self, original_name: str) -> str:
        for _ in range(MAX_KEY_ATTEMPTS):
            key = str(self._key_factory(original_name))
            if key not in self._records and key not in self._reserved:
                return key
            logger.warning(f"Storage key collision for {key}, regenerating")
        raise RuntimeError("Could not allocate a unique storage key")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def register(
        self,
        original_name: str,
        size_bytes: int,
        origin_device: str,
        nickname: str,
        pin: str,
        storage_key: Optional[str] = None,
    ) -> FileRecord:
        """
        Add a new record to the end of the catalog.

        Args:
            original_name: User-supplied display name
            size_bytes: Size of the stored blob
            origin_device: Description of the uploading host
            nickname: Optional uploader label
            pin: Shared secret required to download or delete
            storage_key: A key from ``reserve_storage_key``; generated if None

        Returns:
            The created FileRecord

        Raises:
            InvalidInputError: On a missing PIN or name, a negative size,
                or a storage key that was not reserved
        """
        if not isinstance(pin, str) or not pin:
            raise InvalidInputError("PIN is required")
        _require_name(original_name)
        if size_bytes is None or size_bytes < 0:
            raise InvalidInputError("File size must be a non-negative integer")

        with self._lock:
            if storage_key is None:
                key = self._new_key_locked(original_name)
            elif storage_key in self._reserved:
                key = storage_key
            else:
                raise InvalidInputError(f"Storage key {storage_key!r} was not reserved")

            record = FileRecord.create(
                original_name=original_name,
                storage_key=key,
                size_bytes=size_bytes,
                origin_device=origin_device,
                nickname=nickname,
                pin=pin,
                now=self._clock(),
                ttl=self.ttl,
            )
            self._reserved.discard(key)
            self._records[key] = record
            snapshot = self._snapshot_locked(bump=True)

        self._publish("registered", (key,), snapshot)
        return record

    def authorize_and_fetch(self, storage_key: str, supplied_pin) -> FileRecord:
        """
        Look up a record and check its PIN without removing it.

        Raises:
            RecordNotFoundError: If no live record has the key
            ForbiddenError: If the PIN does not match
        """
        with self._lock:
            record = self._authorize_locked(storage_key, supplied_pin)
        return record

    def authorize_and_remove(self, storage_key: str, supplied_pin) -> FileRecord:
        """
        Look up a record, check its PIN and remove it from the catalog.

        The removal is complete before this returns, so the caller can
        delete the blob without a record pointing at it.

        Raises:
            RecordNotFoundError: If no live record has the key
            ForbiddenError: If the PIN does not match
        """
        with self._lock:
            record = self._authorize_locked(storage_key, supplied_pin)
            del self._records[storage_key]
            snapshot = self._snapshot_locked(bump=True)

        self._publish("deleted", (storage_key,), snapshot)
        return record

    def _authorize_locked(self, storage_key: str, supplied_pin) -> FileRecord:
        record = self._records.get(storage_key) if isinstance(storage_key, str) else None
        if record is None:
            raise RecordNotFoundError()
        if not record.check_pin(supplied_pin):
            raise ForbiddenError()
        return record

    def snapshot(self) -> CatalogSnapshot:
        """Current catalog in upload order."""
        with self._lock:
            return self._snapshot_locked()

    def sweep_expired(self, now: Optional[datetime] = None) -> List[FileRecord]:
        """
        Remove every record whose ``expires_at`` is before ``now``.

        Publishes a single CatalogChangedEvent when anything was removed.

        Args:
            now: Reference time, defaults to the registry clock

        Returns:
            Removed records, in catalog order
        """
        with self._lock:
            now = now or self._clock()
            expired = [r for r in self._records.values() if r.is_expired(now)]
            if not expired:
                return []
            for record in expired:
                del self._records[record.storage_key]
            snapshot = self._snapshot_locked(bump=True)

        self._publish("expired", tuple(r.storage_key for r in expired), snapshot)
        return expired

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot_locked(self, bump: bool = False) -> CatalogSnapshot:
        if bump:
            self._version += 1
        return CatalogSnapshot(version=self._version, records=tuple(self._records.values()))

    def _publish(self, reason: str, storage_keys: tuple, snapshot: CatalogSnapshot) -> None:
        if self._event_publisher is None:
            return
        self._event_publisher.publish(
            CatalogChangedEvent(
                aggregate_id=CATALOG_AGGREGATE_ID,
                occurred_at=self._clock(),
                reason=reason,
                storage_keys=storage_keys,
                snapshot=snapshot,
            )
        )


def _require_name(original_name: str) -> None:
    if not isinstance(original_name, str) or not original_name.strip():
        raise InvalidInputError("File is required")
