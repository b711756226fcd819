"""
File Registry Entities

Domain entity for an uploaded file's metadata.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from .value_objects import PinHash

DEFAULT_TTL = timedelta(minutes=10)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def _js_iso(moment: datetime) -> str:
    """UTC timestamp with millisecond precision and a Z suffix, as browsers format it."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class FileRecord:
    """
    Entity representing one uploaded file.

    Records are immutable; they leave the catalog through an authorized
    delete or the expiry sweep.
    """

    original_name: str
    storage_key: str
    size_bytes: int
    origin_device: str
    nickname: str
    pin_hash: PinHash
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(
        cls,
        original_name: str,
        storage_key: str,
        size_bytes: int,
        origin_device: str,
        nickname: str,
        pin: str,
        now: datetime,
        ttl: timedelta = DEFAULT_TTL,
    ) -> "FileRecord":
        """
        Factory method to create a new record.

        Args:
            original_name: User-supplied display name
            storage_key: Server-generated key of the blob
            size_bytes: Size of the stored blob
            origin_device: Description of the uploading host
            nickname: Optional uploader label
            pin: Raw PIN; only its salted hash is kept
            now: Creation time
            ttl: Time to live

        Returns:
            New FileRecord instance
        """
        return cls(
            original_name=original_name,
            storage_key=storage_key,
            size_bytes=size_bytes,
            origin_device=origin_device or "",
            nickname=nickname or "",
            pin_hash=PinHash.from_pin(pin),
            created_at=now,
            expires_at=now + ttl,
        )

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is strictly past ``expires_at``."""
        return now > self.expires_at

    def check_pin(self, supplied_pin) -> bool:
        return self.pin_hash.matches(supplied_pin)

    def to_public_dict(self) -> Dict[str, Any]:
        """
        Convert to the dictionary sent to clients.

        Keys follow the browser client's naming. PIN material is never
        included.
        """
        return {
            "name": self.original_name,
            "stored": self.storage_key,
            "size": self.size_bytes,
            "device": self.origin_device,
            "nickname": self.nickname,
            "time": _js_iso(self.created_at),
            "expiresAt": int(self.expires_at.timestamp() * 1000),
        }


@dataclass(frozen=True)
class CatalogSnapshot:
    """Ordered, immutable view of the catalog at one version."""

    version: int
    records: tuple

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def to_public_list(self) -> list:
        """Serialize records in upload order, PIN-redacted."""
        return [record.to_public_dict() for record in self.records]
