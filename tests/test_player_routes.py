"""
tests/test_player_routes.py -- Integration tests for the player routes.

Coverage (POST /api/players/assign):
  - 401 without session, 403 for SCOUT and unprovisioned callers
  - 400 on missing playerId or teamId, 404 for an unknown player
  - COACH and ADMIN reassign; the target team is not looked up
  - A rejected request leaves the player's team unchanged
  - Ids of any length are written as given

Also covers GET /api/players (authenticated, team filter) and POST
/api/players (401/403/400/200).
"""

from __future__ import annotations

import pytest

from conftest import ADMIN_ID, COACH_ID, SCOUT_ID
from roster.models import Player, Team

_URL = "/api/players/assign"


@pytest.fixture
def player(app_client) -> str:
    _client, _users, roster = app_client
    roster.create_team(Team(name="U15", id="T1"))
    roster.create_team(Team(name="U17", id="T2"))
    return roster.create_player(Player(name="Kim Lind", position="MF", team_id="T1", id="P1"))


class TestAssignPlayerAuth:
    def test_unauthenticated_returns_401(self, app_client, player) -> None:
        client, _users, roster = app_client
        resp = client.post(_URL, json={"playerId": "P1", "teamId": "T2"})
        assert resp.status_code == 401
        assert roster.get_player("P1").team_id == "T1"

    @pytest.mark.parametrize("caller", [SCOUT_ID, "user_stranger"])
    def test_non_staff_returns_403(self, app_client, auth_headers, player, caller: str) -> None:
        client, _users, roster = app_client
        resp = client.post(_URL, json={"playerId": "P1", "teamId": "T2"}, headers=auth_headers(caller))
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"
        assert roster.get_player("P1").team_id == "T1"


class TestAssignPlayer:
    @pytest.mark.parametrize("body", [{"playerId": "P1"}, {"teamId": "T2"}, {"playerId": "", "teamId": "T2"}, {}])
    def test_missing_fields_returns_400(self, app_client, auth_headers, player, body) -> None:
        client, _users, roster = app_client
        resp = client.post(_URL, json=body, headers=auth_headers(COACH_ID))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_fields"
        assert roster.get_player("P1").team_id == "T1"

    def test_unknown_player_returns_404(self, app_client, auth_headers, player) -> None:
        client, _users, _roster = app_client
        resp = client.post(_URL, json={"playerId": "nope", "teamId": "T2"}, headers=auth_headers(COACH_ID))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    @pytest.mark.parametrize("caller", [COACH_ID, ADMIN_ID])
    def test_staff_reassigns_player(self, app_client, auth_headers, player, caller: str) -> None:
        client, _users, roster = app_client
        resp = client.post(_URL, json={"playerId": "P1", "teamId": "T2"}, headers=auth_headers(caller))
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["id"] == "P1"
        assert data["teamId"] == "T2"
        assert data["position"] == "MF"
        assert roster.get_player("P1").team_id == "T2"

    def test_nonexistent_team_is_written_as_given(self, app_client, auth_headers, player) -> None:
        client, _users, roster = app_client
        resp = client.post(_URL, json={"playerId": "P1", "teamId": "ghost-team"}, headers=auth_headers(COACH_ID))
        assert resp.status_code == 200
        assert roster.get_player("P1").team_id == "ghost-team"

    def test_long_team_id_is_written_as_given(self, app_client, auth_headers, player) -> None:
        client, _users, roster = app_client
        long_id = "t" * 500
        resp = client.post(_URL, json={"playerId": "P1", "teamId": long_id}, headers=auth_headers(COACH_ID))
        assert resp.status_code == 200
        assert roster.get_player("P1").team_id == long_id


class TestCreatePlayer:
    def test_unauthenticated_returns_401(self, app_client) -> None:
        client, _users, roster = app_client
        resp = client.post("/api/players", json={"name": "Kim Lind"})
        assert resp.status_code == 401
        assert roster.list_players() == []

    @pytest.mark.parametrize("caller", [SCOUT_ID, "user_stranger"])
    def test_non_staff_returns_403(self, app_client, auth_headers, caller: str) -> None:
        client, _users, roster = app_client
        resp = client.post("/api/players", json={"name": "Kim Lind"}, headers=auth_headers(caller))
        assert resp.status_code == 403
        assert roster.list_players() == []

    @pytest.mark.parametrize("body", [{}, {"name": ""}, {"position": "MF", "teamId": "T1"}])
    def test_missing_name_returns_400(self, app_client, auth_headers, body) -> None:
        client, _users, roster = app_client
        resp = client.post("/api/players", json=body, headers=auth_headers(COACH_ID))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_fields"
        assert roster.list_players() == []

    def test_coach_creates_player_on_team(self, app_client, auth_headers) -> None:
        client, _users, roster = app_client
        resp = client.post(
            "/api/players",
            json={"name": "Kim Lind", "position": "MF", "teamId": "T1"},
            headers=auth_headers(COACH_ID),
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["name"] == "Kim Lind"
        assert data["position"] == "MF"
        assert data["teamId"] == "T1"
        stored = roster.get_player(data["id"])
        assert stored.team_id == "T1"

    def test_admin_creates_unassigned_player(self, app_client, auth_headers) -> None:
        client, _users, roster = app_client
        resp = client.post("/api/players", json={"name": "Ola Berg"}, headers=auth_headers(ADMIN_ID))
        assert resp.status_code == 200
        assert resp.json()["teamId"] is None
        assert resp.json()["position"] is None
        assert len(roster.list_players()) == 1


class TestListPlayers:
    def test_lists_players_and_filters_by_team(self, app_client, auth_headers, player) -> None:
        client, _users, roster = app_client
        roster.create_player(Player(name="Ola Berg", team_id="T2", id="P2"))

        resp = client.get("/api/players", headers=auth_headers(SCOUT_ID))
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == ["P1", "P2"]

        resp = client.get("/api/players?team=T2", headers=auth_headers(SCOUT_ID))
        assert [p["id"] for p in resp.json()] == ["P2"]
