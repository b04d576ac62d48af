from __future__ import annotations

from fastapi.testclient import TestClient


def test_preserves_incoming_request_id_header(client: TestClient) -> None:
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient) -> None:
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_error_body_carries_request_id(client: TestClient, api_headers: dict[str, str]) -> None:
    resp = client.get("/v1/beats/missing", headers={**api_headers, "X-Request-ID": "req-404"})

    assert resp.status_code == 404
    assert resp.json()["error"]["request_id"] == "req-404"
    assert resp.headers["X-Request-ID"] == "req-404"


def test_health_reports_rate_limit_state(client: TestClient) -> None:
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["rate_limit_enabled"] is True
