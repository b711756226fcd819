"""
File Registry Value Objects

Immutable value objects for storage keys and PIN verification.
"""

import hashlib
import hmac
import re
import secrets
import time
from dataclasses import dataclass, field

from werkzeug.utils import secure_filename

from ..errors import InvalidInputError

MAX_NAME_LENGTH = 100
_FALLBACK_NAME = "file"
_UNSAFE_CHARS = re.compile(r"[\s/\\]+")


def sanitize_filename(original_name: str) -> str:
    """
    Derive a filesystem-safe name fragment from a user-supplied file name.

    Whitespace and path separators become underscores, traversal sequences
    and non-portable characters are removed. Never returns an empty string.
    """
    collapsed = _UNSAFE_CHARS.sub("_", original_name or "")
    safe = secure_filename(collapsed).replace("..", "")
    safe = safe.strip("._")[:MAX_NAME_LENGTH]
    return safe or _FALLBACK_NAME


@dataclass(frozen=True)
class StorageKey:
    """
    Value object for a server-generated storage key.

    Format: ``<epoch millis>-<random token>-<sanitized name>``. The random
    token keeps two keys for the same name in the same millisecond apart.
    """

    value: str

    def __post_init__(self):
        if not self.value or not isinstance(self.value, str):
            raise InvalidInputError("Storage key cannot be empty")
        if "/" in self.value or "\\" in self.value or ".." in self.value:
            raise InvalidInputError(f"Invalid storage key: {self.value!r}")

    @classmethod
    def generate(cls, original_name: str) -> "StorageKey":
        """
        Generate a new storage key for a file name.

        Args:
            original_name: User-supplied display name

        Returns:
            New StorageKey instance
        """
        millis = time.time_ns() // 1_000_000
        token = secrets.token_hex(6)
        return cls(f"{millis}-{token}-{sanitize_filename(original_name)}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PinHash:
    """
    Salted SHA-256 digest of a PIN.

    The raw PIN is never kept; ``matches`` recomputes the digest and compares
    in constant time. Matching is exact and case-sensitive.
    """

    salt: str
    digest: str = field(repr=False)

    @classmethod
    def from_pin(cls, pin: str) -> "PinHash":
        """
        Hash a new PIN.

        Raises:
            InvalidInputError: If the PIN is empty or not a string
        """
        if not isinstance(pin, str) or not pin:
            raise InvalidInputError("PIN is required")
        salt = secrets.token_hex(16)
        return cls(salt=salt, digest=cls._hash(salt, pin))

    @staticmethod
    def _hash(salt: str, pin: str) -> str:
        return hashlib.sha256(f"{salt}:{pin}".encode("utf-8")).hexdigest()

    def matches(self, supplied_pin) -> bool:
        """Check a supplied PIN; anything that is not a non-empty string never matches."""
        if not isinstance(supplied_pin, str) or not supplied_pin:
            return False
        return hmac.compare_digest(self.digest, self._hash(self.salt, supplied_pin))
