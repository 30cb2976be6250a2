"""
api/routes/players.py -- Player roster routes.

Routes:
  GET  /api/players         -- players ordered by name, optionally one team (authenticated)
  POST /api/players         -- register a player, optionally on a team (ADMIN or COACH)
  POST /api/players/assign  -- move a player to a team (ADMIN or COACH)

The target team is not looked up and the player's eligibility is not
checked; the relation is overwritten unconditionally.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, PlayerAssignRequest, PlayerCreateRequest, PlayerResponse
from auth.dependencies import get_session_id, require_staff
from auth.models import User
from core.config import get_settings
from roster.models import Player
from roster.store import RosterStore

logger = logging.getLogger("teamhub.api.players")

router = APIRouter()

_WRITE_LIMIT = get_settings().write_rate_limit


@router.get("/players", response_model=list[PlayerResponse])
def list_players(
    request: Request,
    team: Optional[str] = None,
    _caller_id: str = Depends(get_session_id),
) -> list[PlayerResponse]:
    roster: RosterStore = request.app.state.roster
    return [PlayerResponse.from_player(p) for p in roster.list_players(team_id=team or None)]


@limiter.limit(_WRITE_LIMIT)
@router.post("/players", response_model=PlayerResponse)
def create_player(
    request: Request,
    body: PlayerCreateRequest,
    staff: User = Depends(require_staff),
) -> PlayerResponse:
    if not body.name:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="name is required.").model_dump(),
        )

    roster: RosterStore = request.app.state.roster
    player_id = roster.create_player(
        Player(name=body.name, position=body.position or None, team_id=body.team_id or None)
    )
    logger.info("Player %s (%s) created by %s", player_id, body.name, staff.external_id)
    return PlayerResponse.from_player(roster.get_player(player_id))


@limiter.limit(_WRITE_LIMIT)
@router.post("/players/assign", response_model=PlayerResponse)
def assign_player(
    request: Request,
    body: PlayerAssignRequest,
    staff: User = Depends(require_staff),
) -> PlayerResponse:
    if not body.player_id or not body.team_id:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="playerId and teamId are required.").model_dump(),
        )

    roster: RosterStore = request.app.state.roster
    player = roster.assign_player(body.player_id, body.team_id)
    if player is None:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="not_found", message="Player not found.").model_dump(),
        )

    logger.info("Player %s assigned to team %s by %s", player.id, player.team_id, staff.external_id)
    return PlayerResponse.from_player(player)
