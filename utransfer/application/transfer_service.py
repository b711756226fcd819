"""
Transfer Service

Application service that ties the file registry to blob storage.
Used by the HTTP endpoints and the expiry sweep.
"""

import logging
import time
from datetime import datetime
from typing import BinaryIO, List, Optional, Tuple

from utransfer.domain.errors import (
    BlobMissingError,
    DomainError,
    InvalidInputError,
    StorageWriteError,
)
from utransfer.domain.file_registry import FileRecord, FileRegistry, IBlobStorageRepository

logger = logging.getLogger(__name__)


class TransferService:
    """
    Orchestrates uploads, downloads, deletes and blob cleanup.

    Blob I/O always happens outside the registry lock. Uploads reserve a
    storage key, write the blob, and only then register the record, so a
    record is never visible before its bytes are in place and a failed
    write leaves nothing behind.
    """

    def __init__(
        self,
        registry: FileRegistry,
        storage: IBlobStorageRepository,
        max_upload_bytes: Optional[int] = None,
    ):
        """
        Initialize TransferService.

        Args:
            registry: Catalog of live records
            storage: Blob store addressed by storage key
            max_upload_bytes: Upload size limit, None for unlimited
        """
        self.registry = registry
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes

    def upload(
        self,
        content: BinaryIO,
        original_name: str,
        pin: str,
        nickname: str = "",
        origin_device: str = "",
    ) -> FileRecord:
        """
        Store an uploaded file and add it to the catalog.

        Args:
            content: Binary stream of the uploaded file
            original_name: Client-supplied file name
            pin: Shared secret for download and delete
            nickname: Optional uploader label
            origin_device: Description of the uploading host

        Returns:
            The registered FileRecord

        Raises:
            InvalidInputError: Missing PIN or file
            PayloadTooLargeError: File exceeds max_upload_bytes
            StorageWriteError: Blob could not be written
        """
        if not isinstance(pin, str) or not pin:
            raise InvalidInputError("PIN is required")
        if content is None or not original_name:
            raise InvalidInputError("File is required")

        storage_key = self.registry.reserve_storage_key(original_name)
        try:
            size = self.storage.save(storage_key, content, max_bytes=self.max_upload_bytes)
        except DomainError:
            self.registry.release_storage_key(storage_key)
            raise
        except Exception as e:
            self.registry.release_storage_key(storage_key)
            logger.error(f"Failed to write blob {storage_key}: {e}", exc_info=True)
            raise StorageWriteError(original_error=e) from e

        try:
            record = self.registry.register(
                original_name=original_name,
                size_bytes=size,
                origin_device=origin_device,
                nickname=nickname,
                pin=pin,
                storage_key=storage_key,
            )
        except Exception:
            self.registry.release_storage_key(storage_key)
            self._delete_blob(storage_key)
            raise

        logger.info(f"New file uploaded: {record.original_name} ({size} bytes) as {storage_key}")
        return record

    def open_download(self, storage_key: str, pin) -> Tuple[FileRecord, BinaryIO]:
        """
        Authorize a download and open the blob.

        Returns:
            (record, open binary stream); the caller closes the stream

        Raises:
            RecordNotFoundError: Unknown storage key
            ForbiddenError: PIN mismatch
            BlobMissingError: Record is live but its blob is gone
        """
        record = self.registry.authorize_and_fetch(storage_key, pin)
        stream = self.storage.open(storage_key)
        if stream is None:
            logger.warning(
                f"[DRIFT] Blob missing for live record {storage_key} ({record.original_name})"
            )
            raise BlobMissingError(storage_key)
        logger.info(f"Downloaded: {record.original_name} from {record.origin_device}")
        return record, stream

    def delete(self, storage_key: str, pin) -> FileRecord:
        """
        Authorize a delete, remove the record, then remove its blob.

        A failed blob removal is logged; the blob is later reclaimed by
        orphan cleanup.

        Raises:
            RecordNotFoundError: Unknown storage key
            ForbiddenError: PIN mismatch
        """
        record = self.registry.authorize_and_remove(storage_key, pin)
        self._delete_blob(storage_key)
        logger.info(f"Deleted: {record.original_name} from {record.origin_device}")
        return record

    def expire_files(self, now: Optional[datetime] = None) -> List[FileRecord]:
        """
        Sweep expired records and delete their blobs.

        Returns:
            Records removed from the catalog
        """
        expired = self.registry.sweep_expired(now)
        for record in expired:
            if self._delete_blob(record.storage_key):
                logger.info(f"Auto-deleted expired file: {record.original_name}")
        return expired

    def cleanup_orphaned_blobs(self, max_age_seconds: float) -> int:
        """
        Delete blobs that belong to no live or reserved record.

        Only blobs older than max_age_seconds are touched, which keeps
        in-flight uploads safe.

        Returns:
            Number of blobs removed
        """
        cutoff = time.time() - max_age_seconds
        count = 0
        for name, modified_at in self.storage.iter_blobs():
            if modified_at > cutoff or self.registry.is_known(name):
                continue
            if self._delete_blob(name, quiet=True):
                logger.info(f"Removed orphaned blob: {name}")
                count += 1
        return count

    def _delete_blob(self, storage_key: str, quiet: bool = False) -> bool:
        try:
            removed = self.storage.delete(storage_key)
        except (IOError, OSError) as e:
            logger.error(f"Failed to delete blob {storage_key}: {e}")
            return False
        if not removed and not quiet:
            logger.warning(f"[DRIFT] Blob already missing: {storage_key}")
        return removed
