"""
Blob Storage Repository Interface

Abstract interface for the bytes behind each file record.
The registry stays infrastructure-agnostic; implementations decide where
blobs live (local disk today).
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Optional, Tuple


class IBlobStorageRepository(ABC):
    """
    Interface for blob storage operations, addressed by storage key.

    Contract Guarantees:
    - save() never leaves a partial blob visible under the key
    - open() returns None for missing blobs (no exceptions)
    - delete() is idempotent
    - exists() never raises for invalid keys
    """

    @abstractmethod
    def save(self, storage_key: str, content: BinaryIO, max_bytes: Optional[int] = None) -> int:
        """
        Stream content into storage under the key.

        Args:
            storage_key: Key of the blob
            content: Binary file-like object positioned at the start
            max_bytes: Reject content larger than this many bytes

        Returns:
            Number of bytes written

        Raises:
            PayloadTooLargeError: If content exceeds max_bytes
            IOError: On I/O failures; nothing is left behind under the key
        """
        pass  # pragma: no cover

    @abstractmethod
    def open(self, storage_key: str) -> Optional[BinaryIO]:
        """
        Open a blob for streaming.

        Returns:
            Binary stream the caller must close, or None if missing
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, storage_key: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if a blob was removed, False if there was none

        Raises:
            IOError: If an existing blob could not be removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, storage_key: str) -> bool:
        """Check whether a blob exists. Never raises."""
        pass  # pragma: no cover

    @abstractmethod
    def iter_blobs(self) -> Iterator[Tuple[str, float]]:
        """
        Iterate over stored blobs.

        Yields:
            (storage_key, modified_at epoch seconds) pairs, partial
            uploads included
        """
        pass  # pragma: no cover
