from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.middleware import CORS_HEADERS
from app.main import app


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_health_reports_tracked_clients():
    resp = client.get("/health")

    assert resp.json()["status"] == "ok"
    assert isinstance(resp.json()["tracked_clients"], int)


def test_cors_headers_on_every_response():
    resp = client.get("/health")

    for name, value in CORS_HEADERS.items():
        assert resp.headers[name] == value


def test_options_answered_for_any_path():
    resp = client.options("/anything/at/all")

    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
