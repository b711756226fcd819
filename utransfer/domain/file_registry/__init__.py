"""
File Registry Domain

In-memory catalog of uploaded files, PIN checks and expiry.
"""

from .entities import CatalogSnapshot, FileRecord
from .value_objects import PinHash, StorageKey, sanitize_filename
from .storage_repository import IBlobStorageRepository
from .services import FileRegistry

__all__ = [
    "CatalogSnapshot",
    "FileRecord",
    "FileRegistry",
    "IBlobStorageRepository",
    "PinHash",
    "StorageKey",
    "sanitize_filename",
]
