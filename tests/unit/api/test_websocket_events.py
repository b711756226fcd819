"""
Unit tests for WebSocket catalog broadcasts.

Covers event emission, stale-version dropping and the connect-time send.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from utransfer.api.websocket_events import CATALOG_EVENT, emit_catalog_update
from utransfer.domain.events import CatalogChangedEvent
from utransfer.domain.file_registry import CatalogSnapshot, FileRecord
from utransfer.infrastructure.event_handlers import WebSocketEventHandler

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_socketio():
    """Mock Flask-SocketIO instance."""
    socketio = Mock()
    socketio.emit = Mock()
    return socketio


def make_record(name="a.txt", key="1-abc-a.txt"):
    return FileRecord.create(
        original_name=name,
        storage_key=key,
        size_bytes=3,
        origin_device="laptop",
        nickname="sam",
        pin="secret-pin",
        now=NOW,
        ttl=timedelta(minutes=10),
    )


def make_snapshot(version):
    """Snapshot holding ``version`` records, so payloads tell versions apart."""
    records = tuple(make_record(f"f{i}.txt", f"{i}-abc-f{i}.txt") for i in range(version))
    return CatalogSnapshot(version=version, records=records)


def make_event(version, snapshot=None):
    snapshot = snapshot or make_snapshot(version)
    return CatalogChangedEvent(
        aggregate_id="catalog",
        occurred_at=NOW,
        reason="registered",
        storage_keys=tuple(r.storage_key for r in snapshot.records),
        snapshot=snapshot,
    )


def emitted_versions(mock_socketio):
    """Catalog sizes (== versions for make_snapshot) in emission order."""
    return [len(c.args[1]) for c in mock_socketio.emit.call_args_list]


# =============================================================================
# emit_catalog_update
# =============================================================================

def test_emit_broadcasts_to_everyone(mock_socketio):
    emit_catalog_update(mock_socketio, [{"name": "a.txt"}])

    mock_socketio.emit.assert_called_once_with(CATALOG_EVENT, [{"name": "a.txt"}])


def test_emit_to_single_client(mock_socketio):
    emit_catalog_update(mock_socketio, [], to="sid-1")

    mock_socketio.emit.assert_called_once_with(CATALOG_EVENT, [], to="sid-1")


def test_emit_swallows_transport_errors(mock_socketio):
    mock_socketio.emit.side_effect = RuntimeError("socket closed")

    emit_catalog_update(mock_socketio, [])


# =============================================================================
# WebSocketEventHandler
# =============================================================================

def test_broadcast_payload_is_redacted(mock_socketio):
    record = make_record()
    snapshot = CatalogSnapshot(version=1, records=(record,))

    WebSocketEventHandler(mock_socketio).handle_catalog_changed(make_event(1, snapshot))

    mock_socketio.emit.assert_called_once_with(CATALOG_EVENT, [record.to_public_dict()])
    catalog = mock_socketio.emit.call_args.args[1]
    assert "secret-pin" not in repr(catalog)
    assert "pin" not in catalog[0]


def test_stale_versions_are_dropped(mock_socketio):
    handler = WebSocketEventHandler(mock_socketio)

    handler.handle_catalog_changed(make_event(2))
    handler.handle_catalog_changed(make_event(1))
    handler.handle_catalog_changed(make_event(2))
    handler.handle_catalog_changed(make_event(3))

    assert emitted_versions(mock_socketio) == [2, 3]
    assert handler.last_version == 3


def test_connect_sends_last_broadcast_to_new_client_only(mock_socketio):
    handler = WebSocketEventHandler(mock_socketio)
    handler.handle_catalog_changed(make_event(3))
    mock_socketio.emit.reset_mock()

    handler.send_catalog_to("sid-9", lambda: make_snapshot(3))

    mock_socketio.emit.assert_called_once_with(
        CATALOG_EVENT, make_snapshot(3).to_public_list(), to="sid-9"
    )
    assert handler.last_version == 3


def test_connect_ahead_of_pending_broadcast_keeps_order(mock_socketio):
    handler = WebSocketEventHandler(mock_socketio)

    # Registry is already at v6 while the v5 event is still being published
    handler.send_catalog_to("sid-1", lambda: make_snapshot(6))
    handler.handle_catalog_changed(make_event(5))
    handler.handle_catalog_changed(make_event(6))

    versions = emitted_versions(mock_socketio)
    assert versions == [6]
    assert versions == sorted(versions)
    assert handler.last_version == 6


def test_first_connect_on_empty_catalog(mock_socketio):
    handler = WebSocketEventHandler(mock_socketio)

    handler.send_catalog_to("sid-1", lambda: make_snapshot(0))
    handler.send_catalog_to("sid-2", lambda: make_snapshot(0))

    calls = mock_socketio.emit.call_args_list
    assert calls[0].args == (CATALOG_EVENT, [])
    assert calls[1].kwargs == {"to": "sid-2"}
    assert handler.last_version == 0


def test_send_catalog_errors_are_logged_not_raised(mock_socketio):
    def broken():
        raise RuntimeError("registry unavailable")

    WebSocketEventHandler(mock_socketio).send_catalog_to("sid-1", broken)

    mock_socketio.emit.assert_not_called()
