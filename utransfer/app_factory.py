"""
Application Factory

Creates and configures the Flask application with all dependencies.
Each call builds an independent registry, so tests get isolated apps.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from utransfer.api.websocket_events import register_socketio_events
from utransfer.application.dependency_container import DependencyContainer
from utransfer.application.event_publisher import EventPublisher
from utransfer.application.transfer_service import TransferService
from utransfer.config.settings import AppConfig
from utransfer.config.socketio_config import init_socketio
from utransfer.domain.events import CatalogChangedEvent, DomainEvent
from utransfer.domain.file_registry import FileRegistry, IBlobStorageRepository
from utransfer.infrastructure.event_handlers import LoggingEventHandler, WebSocketEventHandler
from utransfer.infrastructure.local_file_storage_repository import LocalFileStorageRepository
from utransfer.tasks import ExpirySweepScheduler, KeepAlivePinger

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    app.config["MAX_UPLOAD_BYTES"] = config.max_upload_bytes
    app.app_config = config

    CORS(
        app,
        resources={
            r"/*": {
                "origins": config.cors_origins,
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type"],
                "max_age": 3600,
            }
        },
    )

    _initialize_services(app, config)
    _initialize_socketio(app, config)
    _initialize_tasks(app, config)
    _register_blueprints(app)
    _register_health_endpoint(app)

    if config.start_background_tasks:
        start_background_tasks(app)

    return app


def _initialize_services(app: Flask, config: AppConfig) -> None:
    """
    Build the registry, blob store and services, and attach them to the app.

    Args:
        app: Flask application
        config: Application configuration
    """
    container = DependencyContainer()

    event_publisher = EventPublisher()
    event_publisher.subscribe(
        DomainEvent, LoggingEventHandler(logging.getLogger("utransfer.events")).handle
    )

    storage = LocalFileStorageRepository(config.upload_dir)
    registry = FileRegistry(ttl=config.file_ttl, event_publisher=event_publisher)
    transfer_service = TransferService(registry, storage, max_upload_bytes=config.max_upload_bytes)

    container.register_singleton(EventPublisher, event_publisher)
    container.register_singleton(IBlobStorageRepository, storage)
    container.register_singleton(FileRegistry, registry)
    container.register_singleton(TransferService, transfer_service)

    app.container = container

    # Commonly-used services, attached directly for API routes and handlers
    app.file_registry = registry
    app.transfer_service = transfer_service

    logger.info(
        f"Services initialized: upload_dir={config.upload_dir}, "
        f"ttl={config.file_ttl_seconds}s, max_upload={config.max_upload_bytes} bytes"
    )


def _initialize_socketio(app: Flask, config: AppConfig) -> None:
    """
    Initialize Socket.IO and subscribe the catalog broadcaster.

    Args:
        app: Flask application
        config: Application configuration
    """
    app.socketio = None
    app.websocket_handler = None

    if not config.socketio_enabled:
        logger.info("SocketIO disabled - catalog updates will not be pushed")
        return

    try:
        app.socketio = init_socketio(
            app,
            async_mode=config.socketio_async_mode,
            cors_allowed_origins=config.cors_origins,
        )
    except Exception as e:
        logger.warning(f"Could not initialize SocketIO: {e}")
        return

    handler = WebSocketEventHandler(app.socketio)
    app.container.resolve(EventPublisher).subscribe(
        CatalogChangedEvent, handler.handle_catalog_changed
    )
    app.websocket_handler = handler
    register_socketio_events(app)


def _initialize_tasks(app: Flask, config: AppConfig) -> None:
    """Create (but do not start) the periodic background tasks."""
    app.sweep_scheduler = ExpirySweepScheduler(
        app.transfer_service, interval_seconds=config.sweep_interval_seconds
    )
    app.keep_alive = None
    if config.keep_alive_enabled:
        app.keep_alive = KeepAlivePinger(
            config.self_url,
            interval_seconds=config.keep_alive_interval_seconds,
            timeout_seconds=config.keep_alive_timeout_seconds,
        )


def start_background_tasks(app: Flask) -> None:
    """Start the expiry sweep and, if enabled, the keep-alive ping."""
    app.sweep_scheduler.start()
    if app.keep_alive is not None:
        app.keep_alive.start()


def shutdown(app: Flask) -> None:
    """Stop background tasks started by start_background_tasks."""
    app.sweep_scheduler.stop()
    if app.keep_alive is not None:
        app.keep_alive.stop()


def _register_blueprints(app: Flask) -> None:
    from utransfer.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)
    logger.info("Transfer API registered with Swagger UI at /docs")


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of the relay.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "relay ready",
        "files": len(app.file_registry),
        "socketio": "available" if app.socketio is not None else "not_configured",
        "catalog_version": app.websocket_handler.last_version if app.websocket_handler else None,
        "sweep": "running" if app.sweep_scheduler.is_running else "stopped",
    }

    # The sweep only runs when background tasks were started
    if app.app_config.start_background_tasks and not app.sweep_scheduler.is_running:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint, also the keep-alive ping target."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
