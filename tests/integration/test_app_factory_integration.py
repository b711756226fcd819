"""
Integration tests for the assembled application.

Drives upload, download and delete through the Flask test client against
a temporary upload directory, and checks Socket.IO catalog pushes.
"""

import io
import os
from datetime import timedelta

import pytest

from utransfer.app_factory import create_app, shutdown, start_background_tasks


def upload(client, data=b"hello world", filename="notes.txt", pin="1234", nickname="sam"):
    form = {"file": (io.BytesIO(data), filename), "nickname": nickname}
    if pin is not None:
        form["pin"] = pin
    return client.post("/upload", data=form, content_type="multipart/form-data")


def stored_name(response):
    return response.get_json()["file"]["stored"]


def catalog_updates(socket_client):
    return [m["args"][0] for m in socket_client.get_received() if m["name"] == "update"]


class TestAppWiring:
    def test_services_attached(self, app):
        assert app.file_registry is not None
        assert app.transfer_service.registry is app.file_registry
        assert app.websocket_handler is not None
        assert app.keep_alive is None

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "ok"
        assert body["files"] == 0
        assert body["socketio"] == "available"
        assert body["catalog_version"] == -1

    def test_swagger_docs(self, client):
        assert client.get("/swagger.json").status_code == 200
        assert client.get("/docs").status_code == 200

    def test_apps_are_isolated(self, app_config):
        first = create_app(app_config)
        second = create_app(app_config)

        assert first.file_registry is not second.file_registry
        assert first.socketio is not second.socketio

    def test_each_app_broadcasts_to_its_own_clients(self, app_config):
        first = create_app(app_config)
        second = create_app(app_config)
        first_socket = first.socketio.test_client(first)
        second_socket = second.socketio.test_client(second)
        first_socket.get_received()
        second_socket.get_received()

        upload(first.test_client(), filename="first-only.txt")

        first_updates = catalog_updates(first_socket)
        assert len(first_updates) == 1
        assert [r["name"] for r in first_updates[0]] == ["first-only.txt"]
        assert catalog_updates(second_socket) == []
        first_socket.disconnect()
        second_socket.disconnect()

    def test_socketio_can_be_disabled(self, app_config):
        app_config.socketio_enabled = False

        app = create_app(app_config)
        response = upload(app.test_client())

        assert response.status_code == 200
        assert app.socketio is None
        assert app.websocket_handler is None
        assert app.test_client().get("/health").get_json()["socketio"] == "not_configured"

    def test_background_tasks_start_and_stop(self, app_config):
        app_config.sweep_interval_seconds = 3600
        app = create_app(app_config)
        try:
            start_background_tasks(app)
            assert app.sweep_scheduler.is_running
        finally:
            shutdown(app)
        assert not app.sweep_scheduler.is_running


class TestTransferFlow:
    def test_upload_download_delete(self, app, client, app_config):
        response = upload(client, data=b"hello world")
        assert response.status_code == 200
        record = response.get_json()["file"]
        assert record["name"] == "notes.txt"
        assert record["size"] == 11
        assert record["nickname"] == "sam"
        assert "pin" not in record

        key = record["stored"]
        assert os.path.isfile(os.path.join(app_config.upload_dir, key))

        download = client.post("/download", json={"filename": key, "pin": "1234"})
        assert download.status_code == 200
        assert download.data == b"hello world"
        assert "notes.txt" in download.headers["Content-Disposition"]
        download.close()

        deleted = client.post("/delete", json={"filename": key, "pin": "1234"})
        assert deleted.status_code == 200
        assert deleted.get_json() == {"success": True}
        assert not os.path.exists(os.path.join(app_config.upload_dir, key))
        assert len(app.file_registry) == 0

        again = client.post("/download", json={"filename": key, "pin": "1234"})
        assert again.status_code == 404

    def test_wrong_pin(self, client):
        key = stored_name(upload(client, pin="1234"))

        assert client.post("/download", json={"filename": key, "pin": "4321"}).status_code == 403
        assert client.post("/delete", json={"filename": key, "pin": "4321"}).status_code == 403
        assert client.post("/download", json={"filename": key}).status_code == 403

    def test_pin_comparison_is_exact(self, client):
        key = stored_name(upload(client, pin="Ab12"))

        assert client.post("/download", json={"filename": key, "pin": "ab12"}).status_code == 403
        assert client.post("/download", json={"filename": key, "pin": " Ab12"}).status_code == 403

    def test_unknown_file(self, client):
        response = client.post("/download", json={"filename": "1-abc-missing.txt", "pin": "1"})
        assert response.status_code == 404
        assert response.get_json()["error"] == "File not found"

    def test_missing_pin_on_upload(self, client, app_config):
        response = upload(client, pin=None)

        assert response.status_code == 400
        assert response.get_json()["error"] == "PIN is required"
        assert os.listdir(app_config.upload_dir) == []

    def test_oversized_upload(self, app, client, app_config):
        response = upload(client, data=b"x" * (app_config.max_upload_bytes + 1))

        assert response.status_code == 413
        assert os.listdir(app_config.upload_dir) == []
        assert len(app.file_registry) == 0

    def test_request_body_over_hard_limit(self, client, app_config):
        response = upload(client, data=b"x" * (app_config.max_content_length + 1))

        assert response.status_code == 413

    def test_traversal_filename_stays_in_upload_dir(self, client, app_config):
        response = upload(client, filename="../../etc/passwd")

        assert response.status_code == 200
        body = response.get_json()["file"]
        assert "/" not in body["stored"]
        assert os.listdir(app_config.upload_dir) == [body["stored"]]

    def test_blob_removed_behind_registry(self, client, app_config):
        key = stored_name(upload(client))
        os.remove(os.path.join(app_config.upload_dir, key))

        response = client.post("/download", json={"filename": key, "pin": "1234"})

        assert response.status_code == 404
        assert response.get_json()["error"] == "File missing from server"

    def test_expired_file_is_swept(self, app, client, app_config):
        key = stored_name(upload(client))
        registry = app.file_registry
        later = registry.snapshot().records[0].expires_at + timedelta(seconds=1)

        app.transfer_service.expire_files(later)

        assert len(registry) == 0
        assert not os.path.exists(os.path.join(app_config.upload_dir, key))
        assert client.post("/download", json={"filename": key, "pin": "1234"}).status_code == 404


class TestCatalogBroadcast:
    def test_connect_receives_current_catalog(self, app, client):
        upload(client, filename="first.txt")

        socket_client = app.socketio.test_client(app)
        updates = catalog_updates(socket_client)

        assert len(updates) == 1
        assert [r["name"] for r in updates[0]] == ["first.txt"]
        socket_client.disconnect()

    def test_mutations_are_broadcast(self, app, client):
        socket_client = app.socketio.test_client(app)
        assert catalog_updates(socket_client) == [[]]

        key = stored_name(upload(client, filename="a.txt"))
        upload(client, filename="b.txt")
        client.post("/delete", json={"filename": key, "pin": "1234"})

        updates = catalog_updates(socket_client)
        assert [[r["name"] for r in u] for u in updates] == [["a.txt"], ["a.txt", "b.txt"], ["b.txt"]]
        for catalog in updates:
            for record in catalog:
                assert set(record) == {"name", "stored", "size", "device", "nickname", "time", "expiresAt"}
        socket_client.disconnect()

    def test_failed_operations_do_not_broadcast(self, app, client):
        key = stored_name(upload(client))
        socket_client = app.socketio.test_client(app)
        socket_client.get_received()

        upload(client, pin=None)
        client.post("/delete", json={"filename": key, "pin": "wrong"})
        client.post("/download", json={"filename": key, "pin": "1234"}).close()

        assert catalog_updates(socket_client) == []
        socket_client.disconnect()
