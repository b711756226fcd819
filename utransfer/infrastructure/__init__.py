"""Infrastructure layer: blob storage and event handlers."""

from .local_file_storage_repository import LocalFileStorageRepository

__all__ = ["LocalFileStorageRepository"]
