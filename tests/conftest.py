"""
Shared pytest fixtures and configuration for the UTransfer test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Registry, storage and application fixtures
"""

from datetime import timedelta

import pytest
from hypothesis import HealthCheck, settings

from tests.fixtures import FakeClock, InMemoryBlobStorage, RecordingPublisher
from utransfer.application.transfer_service import TransferService
from utransfer.config.settings import AppConfig
from utransfer.domain.file_registry import FileRegistry

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def publisher():
    """Provide a publisher that records events."""
    return RecordingPublisher()


@pytest.fixture
def registry(clock, publisher):
    """Provide an empty registry with a 600s TTL."""
    return FileRegistry(ttl=timedelta(seconds=600), event_publisher=publisher, clock=clock)


@pytest.fixture
def memory_storage():
    return InMemoryBlobStorage()


@pytest.fixture
def transfer_service(registry, memory_storage):
    return TransferService(registry, memory_storage, max_upload_bytes=1024)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app_config(tmp_path):
    """Configuration pointing at a temporary upload directory."""
    config = AppConfig()
    config.upload_dir = str(tmp_path / "uploads")
    config.max_upload_bytes = 1024 * 1024
    config.keep_alive_enabled = False
    config.socketio_enabled = True
    config.start_background_tasks = False
    return config


@pytest.fixture
def app(app_config):
    from utransfer.app_factory import create_app

    flask_app = create_app(app_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem, full app)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
