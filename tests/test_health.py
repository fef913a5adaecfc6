"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' against a live store
  - a failing database probe degrades the status instead of raising
  - no authentication required
"""

from __future__ import annotations


def test_health_returns_200_with_components(api_client):
    """Health endpoint returns 200 with status, version, and components."""
    resp = api_client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["components"]["app"] == "ok"
    assert data["components"]["database"] == "ok"


def test_health_degraded_when_database_unreachable(api_client, monkeypatch):
    def broken_ping():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(api_client.app.state.user_store, "ping", broken_ping)
    resp = api_client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"
    assert "locked" not in resp.text


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible without any authentication headers."""
    api_client.cookies.clear()
    resp = api_client.get("/api/health", headers={})
    assert resp.status_code == 200


def test_unknown_route_uses_error_envelope(api_client):
    resp = api_client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json()["code"] == "http_404"
