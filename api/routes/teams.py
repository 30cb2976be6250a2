"""
api/routes/teams.py -- Team routes.

Routes:
  GET  /api/teams  -- all teams ordered by name (authenticated)
  POST /api/teams  -- create a team; the creator becomes a member (ADMIN or COACH)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, TeamCreateRequest, TeamResponse
from auth.dependencies import get_session_id, require_staff
from auth.models import User
from core.config import get_settings
from roster.models import Team
from roster.store import RosterStore

logger = logging.getLogger("teamhub.api.teams")

router = APIRouter()


@router.get("/teams", response_model=list[TeamResponse])
def list_teams(request: Request, _caller_id: str = Depends(get_session_id)) -> list[TeamResponse]:
    roster: RosterStore = request.app.state.roster
    return [TeamResponse.from_team(t) for t in roster.list_teams()]


@limiter.limit(get_settings().write_rate_limit)
@router.post("/teams", response_model=TeamResponse)
def create_team(
    request: Request,
    body: TeamCreateRequest,
    creator: User = Depends(require_staff),
) -> TeamResponse:
    """Create a team named `name` and record the creator as its first member."""
    if not body.name:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="name is required.").model_dump(),
        )

    roster: RosterStore = request.app.state.roster
    team_id = roster.create_team(Team(name=body.name))
    roster.add_team_member(team_id, creator.external_id)
    logger.info("Team %s (%s) created by %s", team_id, body.name, creator.external_id)
    return TeamResponse.from_team(roster.get_team(team_id))
