"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from . import api

# =============================================================================
# Request Models
# =============================================================================

transfer_request = api.model(
    "TransferRequest",
    {
        "filename": fields.String(
            required=True,
            description="Storage key of the file (the 'stored' field of a record)",
            example="1760000000000-a1b2c3d4e5f6-report.pdf",
        ),
        "pin": fields.String(required=True, description="PIN chosen by the uploader"),
    },
)

# =============================================================================
# Response Models
# =============================================================================

file_record = api.model(
    "FileRecord",
    {
        "name": fields.String(description="Original file name"),
        "stored": fields.String(description="Storage key"),
        "size": fields.Integer(description="Size in bytes", min=0),
        "device": fields.String(description="Uploading device"),
        "nickname": fields.String(description="Uploader nickname"),
        "time": fields.String(description="Upload time (ISO 8601)"),
        "expiresAt": fields.Integer(description="Expiry time (epoch milliseconds)"),
    },
)

upload_response = api.model(
    "UploadResponse",
    {
        "success": fields.Boolean(description="Always true on success"),
        "file": fields.Nested(file_record, description="The stored file"),
    },
)

success_response = api.model(
    "SuccessResponse",
    {"success": fields.Boolean(description="Always true on success")},
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Human-readable error message"),
        "category": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "action": fields.String(description="Suggested action"),
    },
)
