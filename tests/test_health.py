"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' when both stores answer
  - No authentication required
"""

from __future__ import annotations


def test_health_returns_200_with_components(app_client):
    """Health endpoint returns 200 with status, version, and components."""
    client, _users, _roster = app_client
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"]
    assert data["components"]["app"] == "ok"
    assert data["components"]["database"] == "ok"


def test_health_no_auth_required(app_client):
    client, _users, _roster = app_client
    resp = client.get("/api/health", headers={})
    assert resp.status_code == 200


def test_non_object_body_is_422(app_client, auth_headers):
    client, _users, _roster = app_client
    headers = {**auth_headers("user_scout"), "Content-Type": "application/json"}
    resp = client.post("/api/invites/accept", content=b"[]", headers=headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "validation_error"
