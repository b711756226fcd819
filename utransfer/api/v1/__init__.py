"""
API v1 - UTransfer REST API

Upload, download and delete endpoints with OpenAPI/Swagger documentation.
Routes are mounted at the root for compatibility with the browser client.
"""

from flask import Blueprint
from flask_restx import Api

api_v1_bp = Blueprint("api_v1", __name__)

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_v1_bp,
    version="1.0",
    title="UTransfer API",
    description="PIN-protected temporary file relay",
    doc="/docs",  # Swagger UI will be available at /docs
    # No authentication required; access is gated per file by PIN
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import transfer_ns  # noqa: E402

api.add_namespace(transfer_ns, path="/")
