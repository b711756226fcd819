"""
Relay error taxonomy.

Domain exceptions say what went wrong; ApplicationError turns one into the
JSON body and status code the endpoints return.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Kinds of failure a client can see, one per HTTP status."""

    INVALID_INPUT = "invalid_input"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INTERNAL_ERROR = "internal_error"


# Default texts; "message" is what the browser client shows
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_INPUT: {
        "title": "Invalid Request",
        "message": "The request is missing required information.",
        "action": "Choose a file and a PIN, then try again.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Invalid PIN",
        "message": "Invalid PIN",
        "action": "Ask the uploader for the correct PIN.",
    },
    ErrorCategory.NOT_FOUND: {
        "title": "File Not Found",
        "message": "File not found",
        "action": "The file may have expired or been deleted.",
    },
    ErrorCategory.PAYLOAD_TOO_LARGE: {
        "title": "File Too Large",
        "message": "File too large (max 500 MB)",
        "action": "Split the file or compress it before uploading.",
    },
    ErrorCategory.INTERNAL_ERROR: {
        "title": "Server Error",
        "message": "Internal server error",
        "action": "Please try again later.",
    },
}

HTTP_STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.INVALID_INPUT: 400,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.PAYLOAD_TOO_LARGE: 413,
    ErrorCategory.INTERNAL_ERROR: 500,
}


# ============================================================================
# Domain Exceptions
# ============================================================================

class DomainError(Exception):
    """
    Base class for failures raised by the registry and services.

    Each subclass names the category it maps to, so the API layer can turn
    any domain error into a response without a lookup table of its own.
    """

    category = ErrorCategory.INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: User-facing message; defaults to the category message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message or ERROR_MESSAGES[self.category]["message"])
        self.original_error = original_error


class InvalidInputError(DomainError):
    """Raised when a request is missing a PIN, a file or a file name."""

    category = ErrorCategory.INVALID_INPUT


class ForbiddenError(DomainError):
    """Raised when the supplied PIN does not match the record's PIN."""

    category = ErrorCategory.FORBIDDEN


class RecordNotFoundError(DomainError):
    """Raised when no live record has the requested storage key."""

    category = ErrorCategory.NOT_FOUND


class BlobMissingError(RecordNotFoundError):
    """
    Raised when a live record has no blob in storage.

    Indicates drift between the catalog and the upload directory.
    """

    def __init__(self, storage_key: str):
        super().__init__("File missing from server")
        self.storage_key = storage_key


class PayloadTooLargeError(DomainError):
    """Raised when an upload exceeds the configured maximum size."""

    category = ErrorCategory.PAYLOAD_TOO_LARGE

    def __init__(self, max_bytes: Optional[int] = None):
        message = None
        if max_bytes:
            message = f"File too large (max {max_bytes // (1024 * 1024)} MB)"
        super().__init__(message)
        self.max_bytes = max_bytes


class StorageWriteError(DomainError):
    """Raised when uploaded bytes could not be written to the blob store."""

    def __init__(self, message: str = "Server error during upload", original_error: Exception = None):
        super().__init__(message, original_error)


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    A failure ready to be sent to a client.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        message: Optional[str] = None,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            message: User-facing message, overrides the category default
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.INTERNAL_ERROR]
        )
        self.title = error_info["title"]
        self.message = message or error_info["message"]
        self.action = error_info["action"]
        self.http_status_code = HTTP_STATUS_CODES.get(category, 500)

        super().__init__(self.message)

    @classmethod
    def from_domain_error(cls, error: DomainError) -> "ApplicationError":
        """Wrap a domain error, keeping its message."""
        return cls(
            error.category,
            message=str(error),
            technical_message=repr(error.original_error) if error.original_error else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        The ``error`` key holds the human-readable message the browser
        client shows to the user.
        """
        return {
            "error": self.message,
            "category": self.category.value,
            "title": self.title,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    message: Optional[str] = None,
    technical_message: Optional[str] = None,
    status_code: Optional[int] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Build the (body, status) tuple an endpoint returns for ``category``.

    Args:
        category: Error category
        message: User-facing message, overrides the category default
        technical_message: Technical error details for logging
        status_code: HTTP status code, defaults to the category's status

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, message, technical_message)
    return error.to_dict(), status_code or error.http_status_code


def error_response_for(error: DomainError) -> tuple[Dict[str, Any], int]:
    """Create the API response for a domain error."""
    app_error = ApplicationError.from_domain_error(error)
    return app_error.to_dict(), app_error.http_status_code
