"""
Local File Storage Repository Implementation

Concrete implementation of IBlobStorageRepository for the local filesystem.
Blobs are flat files named by storage key inside one upload directory.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from utransfer.domain.errors import PayloadTooLargeError
from utransfer.domain.file_registry.storage_repository import IBlobStorageRepository

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
PARTIAL_SUFFIX = ".part"


class LocalFileStorageRepository(IBlobStorageRepository):
    """
    Local filesystem implementation of IBlobStorageRepository.

    Uploads are streamed to ``<key>.part`` and renamed into place once
    complete, so a blob under its final key is always whole.

    Attributes:
        base_path: Upload directory
    """

    def __init__(self, base_path: str = "uploads"):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Upload directory, created if missing
        """
        self.base_path = Path(base_path)
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        """
        Ensure the upload directory exists.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self.base_path}"
            ) from e

    def _path_for(self, storage_key: str) -> Optional[Path]:
        """Resolve a key to a path inside base_path, or None for unsafe keys."""
        if not storage_key or not storage_key.strip():
            return None
        if "/" in storage_key or "\\" in storage_key or storage_key in (".", ".."):
            return None
        return self.base_path / storage_key

    def save(self, storage_key: str, content: BinaryIO, max_bytes: Optional[int] = None) -> int:
        """
        Stream content to disk under the key.

        Args:
            storage_key: Key of the blob
            content: Binary file-like object
            max_bytes: Reject content larger than this many bytes

        Returns:
            Number of bytes written

        Raises:
            ValueError: If the key is empty or unsafe
            PayloadTooLargeError: If content exceeds max_bytes
            IOError: If there are I/O errors during the operation
        """
        full_path = self._path_for(storage_key)
        if full_path is None:
            raise ValueError(f"Invalid storage key: {storage_key!r}")

        partial_path = full_path.with_name(full_path.name + PARTIAL_SUFFIX)
        written = 0
        try:
            with open(partial_path, "wb") as f:
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise PayloadTooLargeError(max_bytes)
                    f.write(chunk)
            os.replace(partial_path, full_path)
            return written

        except PayloadTooLargeError:
            self._discard(partial_path)
            raise
        except (IOError, OSError) as e:
            self._discard(partial_path)
            raise IOError(f"Failed to save blob {storage_key}: {e}") from e

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial blob {path}: {e}")

    def open(self, storage_key: str) -> Optional[BinaryIO]:
        """
        Open a blob for streaming.

        The handle stays readable even if the blob is deleted afterwards.

        Returns:
            Open binary file, or None if the blob doesn't exist
        """
        full_path = self._path_for(storage_key)
        if full_path is None:
            return None
        try:
            return open(full_path, "rb")
        except (FileNotFoundError, IsADirectoryError):
            return None
        except OSError as e:
            logger.error(f"Failed to open blob {storage_key}: {e}")
            return None

    def delete(self, storage_key: str) -> bool:
        """
        Delete a blob from disk.

        Returns:
            True if a file was removed, False if none existed

        Raises:
            PermissionError: If there are insufficient permissions to delete
            IOError: If there are I/O errors during the operation
        """
        full_path = self._path_for(storage_key)
        if full_path is None or not full_path.is_file():
            return False
        try:
            full_path.unlink()
            return True
        except FileNotFoundError:
            return False
        except PermissionError:
            raise
        except OSError as e:
            raise IOError(f"Failed to delete blob {storage_key}: {e}") from e

    def exists(self, storage_key: str) -> bool:
        """Check if a blob exists. Never raises."""
        full_path = self._path_for(storage_key)
        try:
            return full_path is not None and full_path.is_file()
        except OSError:
            return False

    def iter_blobs(self) -> Iterator[Tuple[str, float]]:
        """Yield (name, mtime) for every file in the upload directory."""
        try:
            entries = list(self.base_path.iterdir())
        except OSError as e:
            logger.error(f"Failed to list upload directory {self.base_path}: {e}")
            return
        for entry in entries:
            try:
                if entry.is_file():
                    yield entry.name, entry.stat().st_mtime
            except OSError:
                # Removed between listing and stat
                continue
