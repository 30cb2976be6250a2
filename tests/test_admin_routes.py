"""
tests/test_admin_routes.py -- Integration tests for the user administration routes.

Coverage:
  - POST /api/admin/users/role: 401 without session, 403 for COACH, SCOUT and
    unprovisioned callers, 400 on missing fields, 404 for an unknown target,
    200 for an ADMIN; the stored role never changes on a failure path
  - GET /api/admin/users: admin only, newest first, team memberships included
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auth.store import UserStore
from conftest import ADMIN_ID, COACH_ID, SCOUT_ID
from roster.store import RosterStore

_ROLE_URL = "/api/admin/users/role"


def _role_of(user_store: UserStore, external_id: str) -> str:
    return user_store.get_by_external_id(external_id).role


class TestRoleUpdateAuth:
    """Only an ADMIN may change roles, and a rejected request writes nothing."""

    def test_unauthenticated_returns_401(self, app_client: tuple[TestClient, UserStore, RosterStore]) -> None:
        client, user_store, _roster = app_client
        resp = client.post(_ROLE_URL, json={"targetUserId": SCOUT_ID, "role": "ADMIN"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"
        assert _role_of(user_store, SCOUT_ID) == "SCOUT"

    @pytest.mark.parametrize("caller", [COACH_ID, SCOUT_ID, "user_stranger"])
    def test_non_admin_returns_403(self, app_client, auth_headers, caller: str) -> None:
        client, user_store, _roster = app_client
        resp = client.post(_ROLE_URL, json={"targetUserId": SCOUT_ID, "role": "ADMIN"}, headers=auth_headers(caller))
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"
        assert _role_of(user_store, SCOUT_ID) == "SCOUT"

    def test_scout_cannot_promote_self(self, app_client, auth_headers) -> None:
        client, user_store, _roster = app_client
        resp = client.post(
            _ROLE_URL, json={"targetUserId": SCOUT_ID, "role": "ADMIN"}, headers=auth_headers(SCOUT_ID)
        )
        assert resp.status_code == 403
        assert _role_of(user_store, SCOUT_ID) == "SCOUT"


class TestRoleUpdate:
    @pytest.mark.parametrize(
        "body",
        [
            {"role": "COACH"},
            {"targetUserId": SCOUT_ID},
            {"targetUserId": "", "role": "COACH"},
            {},
        ],
    )
    def test_missing_fields_returns_400(self, app_client, auth_headers, body) -> None:
        client, user_store, _roster = app_client
        resp = client.post(_ROLE_URL, json=body, headers=auth_headers(ADMIN_ID))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_fields"
        assert _role_of(user_store, SCOUT_ID) == "SCOUT"

    def test_unknown_target_returns_404(self, app_client, auth_headers) -> None:
        client, _users, _roster = app_client
        resp = client.post(
            _ROLE_URL, json={"targetUserId": "user_missing", "role": "COACH"}, headers=auth_headers(ADMIN_ID)
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_admin_promotes_scout_to_coach(self, app_client, auth_headers) -> None:
        client, user_store, _roster = app_client
        resp = client.post(
            _ROLE_URL, json={"targetUserId": SCOUT_ID, "role": "COACH"}, headers=auth_headers(ADMIN_ID)
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["externalId"] == SCOUT_ID
        assert data["role"] == "COACH"
        assert _role_of(user_store, SCOUT_ID) == "COACH"

    def test_promotion_takes_effect_on_next_request(self, app_client, auth_headers) -> None:
        """Roles are read per request, so the promoted scout can invite immediately."""
        client, _users, roster = app_client
        client.post(_ROLE_URL, json={"targetUserId": SCOUT_ID, "role": "COACH"}, headers=auth_headers(ADMIN_ID))
        resp = client.post("/api/invites", json={"email": "a@b.com", "teamId": "T1"}, headers=auth_headers(SCOUT_ID))
        assert resp.status_code == 200
        assert len(roster.list_invites()) == 1

    def test_unrecognised_role_is_stored_as_given(self, app_client, auth_headers) -> None:
        client, user_store, _roster = app_client
        resp = client.post(
            _ROLE_URL, json={"targetUserId": COACH_ID, "role": "PHYSIO"}, headers=auth_headers(ADMIN_ID)
        )
        assert resp.status_code == 200
        assert _role_of(user_store, COACH_ID) == "PHYSIO"

        # PHYSIO carries no staff permissions.
        resp = client.post("/api/invites", json={"email": "a@b.com", "teamId": "T1"}, headers=auth_headers(COACH_ID))
        assert resp.status_code == 403

    def test_admin_can_demote_self(self, app_client, auth_headers) -> None:
        client, user_store, _roster = app_client
        resp = client.post(
            _ROLE_URL, json={"targetUserId": ADMIN_ID, "role": "SCOUT"}, headers=auth_headers(ADMIN_ID)
        )
        assert resp.status_code == 200
        assert _role_of(user_store, ADMIN_ID) == "SCOUT"


class TestListUsers:
    def test_non_admin_is_forbidden(self, app_client, auth_headers) -> None:
        client, _users, _roster = app_client
        assert client.get("/api/admin/users").status_code == 401
        assert client.get("/api/admin/users", headers=auth_headers(COACH_ID)).status_code == 403

    def test_lists_users_newest_first_with_teams(self, app_client, auth_headers) -> None:
        client, _users, roster = app_client
        roster.add_team_member("T1", SCOUT_ID)
        roster.add_team_member("T2", SCOUT_ID)

        resp = client.get("/api/admin/users", headers=auth_headers(ADMIN_ID))
        assert resp.status_code == 200
        data = resp.json()
        assert [u["externalId"] for u in data] == [SCOUT_ID, COACH_ID, ADMIN_ID]
        by_id = {u["externalId"]: u for u in data}
        assert by_id[SCOUT_ID]["teamIds"] == ["T1", "T2"]
        assert by_id[ADMIN_ID]["teamIds"] == []
        assert by_id[COACH_ID]["role"] == "COACH"
