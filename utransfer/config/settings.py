"""
Application Settings

Environment-driven configuration for the relay. Every value can be
overridden after construction, which is how tests shrink TTLs and
intervals.
"""

import os
from datetime import timedelta

MIB = 1024 * 1024


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class AppConfig:
    """Application configuration."""

    def __init__(self):
        # Server
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 5000))
        self.debug = _env_bool("FLASK_DEBUG", "false")
        self.self_url = os.getenv("RENDER_EXTERNAL_URL", f"http://localhost:{self.port}")

        # Storage and lifecycle
        self.upload_dir = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
        self.max_upload_bytes = int(os.getenv("MAX_UPLOAD_MB", 500)) * MIB
        self.file_ttl_seconds = int(os.getenv("FILE_TTL_SECONDS", 10 * 60))
        self.sweep_interval_seconds = float(os.getenv("SWEEP_INTERVAL_SECONDS", 60))

        # Keep-alive self-ping
        self.keep_alive_enabled = _env_bool("KEEP_ALIVE_ENABLED", "true")
        self.keep_alive_interval_seconds = float(os.getenv("KEEP_ALIVE_INTERVAL_SECONDS", 5 * 60))
        self.keep_alive_timeout_seconds = float(os.getenv("KEEP_ALIVE_TIMEOUT_SECONDS", 10))

        # SocketIO configuration
        self.socketio_enabled = _env_bool("SOCKETIO_ENABLED", "true")
        self.socketio_async_mode = os.getenv("SOCKETIO_ASYNC_MODE", "threading")

        self.cors_origins = os.getenv("CORS_ORIGINS", "*")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Background tasks are started by main.py, not by create_app
        self.start_background_tasks = False

    @property
    def file_ttl(self) -> timedelta:
        return timedelta(seconds=self.file_ttl_seconds)

    @property
    def max_content_length(self) -> int:
        """Request body cap: the file limit plus room for multipart framing."""
        return self.max_upload_bytes + MIB
