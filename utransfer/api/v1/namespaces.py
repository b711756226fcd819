"""
API Namespaces - Transfer endpoints
"""

from flask import current_app, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.exceptions import ClientDisconnected, RequestEntityTooLarge

from utransfer.api.v1.models import (
    error_response,
    success_response,
    transfer_request,
    upload_response,
)
from utransfer.domain.errors import (
    BlobMissingError,
    DomainError,
    ErrorCategory,
    create_error_response,
    error_response_for,
)
from utransfer.application.transfer_service import TransferService
from utransfer.infrastructure.device_info import describe_client

transfer_ns = Namespace("transfer", description="Upload, download and delete files")


def _transfer_service() -> TransferService:
    return current_app.container.resolve(TransferService)


def _read_transfer_request():
    """Extract (storage_key, pin) from a JSON object body; the key must be a non-empty string."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, None
    storage_key = data.get("filename")
    if not isinstance(storage_key, str) or not storage_key.strip():
        return None, None
    return storage_key, data.get("pin")


def _short(storage_key: str) -> str:
    return storage_key[:24]


@transfer_ns.route("/upload")
class Upload(Resource):
    """Upload a file"""

    @transfer_ns.doc("upload_file")
    @transfer_ns.response(200, "Success", upload_response)
    @transfer_ns.response(400, "Bad Request", error_response)
    @transfer_ns.response(413, "File Too Large", error_response)
    @transfer_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Upload a file protected by a PIN

        Multipart form with ``file``, ``pin`` and optional ``nickname``.
        The file is listed for everyone and expires after the configured TTL.
        """
        max_bytes = current_app.config.get("MAX_UPLOAD_BYTES")
        try:
            pin = request.form.get("pin", "")
            nickname = request.form.get("nickname", "")
            uploaded = request.files.get("file")
        except RequestEntityTooLarge:
            current_app.logger.warning("[UPLOAD] Rejected request body over size limit")
            return create_error_response(
                ErrorCategory.PAYLOAD_TOO_LARGE,
                f"File too large (max {max_bytes // (1024 * 1024)} MB)" if max_bytes else None,
            )
        except ClientDisconnected:
            current_app.logger.info("[UPLOAD] Client disconnected during upload")
            return create_error_response(
                ErrorCategory.INVALID_INPUT, "Upload was interrupted"
            )

        if not pin:
            return create_error_response(ErrorCategory.INVALID_INPUT, "PIN is required")
        if uploaded is None or not uploaded.filename:
            return create_error_response(ErrorCategory.INVALID_INPUT, "File is required")

        try:
            record = _transfer_service().upload(
                uploaded.stream,
                original_name=uploaded.filename,
                pin=pin,
                nickname=nickname,
                origin_device=describe_client(
                    request.remote_addr, request.headers.get("User-Agent")
                ),
            )
            return {"success": True, "file": record.to_public_dict()}, 200

        except DomainError as e:
            current_app.logger.warning(f"[UPLOAD] {uploaded.filename}: {e}")
            return error_response_for(e)
        except Exception as e:
            current_app.logger.exception(f"[UPLOAD] Unexpected error: {str(e)}")
            return create_error_response(
                ErrorCategory.INTERNAL_ERROR, "Server error during upload"
            )


@transfer_ns.route("/download")
class Download(Resource):
    """Download a file"""

    @transfer_ns.doc("download_file")
    @transfer_ns.expect(transfer_request)
    @transfer_ns.response(200, "File content")
    @transfer_ns.response(400, "Bad Request", error_response)
    @transfer_ns.response(403, "Invalid PIN", error_response)
    @transfer_ns.response(404, "File Not Found", error_response)
    def post(self):
        """
        Download a file with its PIN

        Streams the file as an attachment named after the original upload.
        """
        storage_key, pin = _read_transfer_request()
        if storage_key is None:
            return create_error_response(ErrorCategory.INVALID_INPUT, "filename is required")

        try:
            record, stream = _transfer_service().open_download(storage_key, pin)
        except BlobMissingError as e:
            current_app.logger.error(f"[DRIFT] Blob missing for {_short(storage_key)}")
            return error_response_for(e)
        except DomainError as e:
            current_app.logger.info(f"[DOWNLOAD] Refused {_short(storage_key)}: {e}")
            return error_response_for(e)
        except Exception as e:
            current_app.logger.exception(f"[DOWNLOAD] Unexpected error: {str(e)}")
            return create_error_response(ErrorCategory.INTERNAL_ERROR)

        current_app.logger.info(f"[DOWNLOAD] Serving {record.original_name}")
        return send_file(
            stream,
            as_attachment=True,
            download_name=record.original_name,
            mimetype="application/octet-stream",
        )


@transfer_ns.route("/delete")
class Delete(Resource):
    """Delete a file"""

    @transfer_ns.doc("delete_file")
    @transfer_ns.expect(transfer_request)
    @transfer_ns.response(200, "Deleted", success_response)
    @transfer_ns.response(400, "Bad Request", error_response)
    @transfer_ns.response(403, "Invalid PIN", error_response)
    @transfer_ns.response(404, "File Not Found", error_response)
    def post(self):
        """
        Delete a file with its PIN

        Removes the file from the list for everyone and deletes its bytes.
        """
        storage_key, pin = _read_transfer_request()
        if storage_key is None:
            return create_error_response(ErrorCategory.INVALID_INPUT, "filename is required")

        try:
            _transfer_service().delete(storage_key, pin)
            return {"success": True}, 200

        except DomainError as e:
            current_app.logger.info(f"[DELETE] Refused {_short(storage_key)}: {e}")
            return error_response_for(e)
        except Exception as e:
            current_app.logger.exception(f"[DELETE] Unexpected error: {str(e)}")
            return create_error_response(ErrorCategory.INTERNAL_ERROR)
