"""
api/routes/invites.py -- Team invite routes.

Routes:
  POST /api/invites         -- create a PENDING invite (ADMIN or COACH)
  GET  /api/invites/list    -- pending invites addressed to the caller's email
  POST /api/invites/accept  -- accept an invite as the calling identity

Acceptance is two writes: the invite row first, then team membership. They
are not wrapped in one transaction.

Acceptance does not compare the invite's email with the caller, and an
already-accepted invite can be accepted again (the receiver is overwritten).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, InviteAcceptRequest, InviteCreateRequest, InviteListRow, InviteResponse
from auth.dependencies import get_session_id, require_staff
from auth.models import User
from auth.store import UserStore
from core.config import get_settings
from roster.models import Invite
from roster.store import RosterStore

logger = logging.getLogger("teamhub.api.invites")

# Auth policy:
# - POST /api/invites:         requires ADMIN or COACH (require_staff)
# - GET  /api/invites/list:    requires auth (get_session_id)
# - POST /api/invites/accept:  requires auth (get_session_id)
router = APIRouter()

_WRITE_LIMIT = get_settings().write_rate_limit


@limiter.limit(_WRITE_LIMIT)
@router.post("/invites", response_model=InviteResponse)
def create_invite(
    request: Request,
    body: InviteCreateRequest,
    sender: User = Depends(require_staff),
) -> InviteResponse:
    """Create one PENDING invite for email -> teamId. Duplicates are not detected."""
    if not body.email or not body.team_id:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="email and teamId are required.").model_dump(),
        )

    roster: RosterStore = request.app.state.roster
    invite = roster.create_invite(Invite(email=body.email, team_id=body.team_id, invited_by=sender.external_id))
    logger.info("Invite %s to team %s created by %s", invite.id, invite.team_id, sender.external_id)
    return InviteResponse.from_invite(invite)


@router.get("/invites/list", response_model=list[InviteListRow])
def list_my_invites(
    request: Request,
    caller_id: str = Depends(get_session_id),
) -> list[InviteListRow]:
    """Return pending invites for the caller's email. Callers without a user record get []."""
    user_store: UserStore = request.app.state.user_store
    roster: RosterStore = request.app.state.roster

    user = user_store.get_by_external_id(caller_id)
    if user is None:
        return []

    team_names = {t.id: t.name for t in roster.list_teams()}
    return [
        InviteListRow(
            **InviteResponse.from_invite(inv).model_dump(),
            team_name=team_names.get(inv.team_id),
        )
        for inv in roster.list_pending_invites_for_email(user.email)
    ]


@limiter.limit(_WRITE_LIMIT)
@router.post("/invites/accept", response_model=InviteResponse)
def accept_invite(
    request: Request,
    body: InviteAcceptRequest,
    caller_id: str = Depends(get_session_id),
) -> InviteResponse:
    """Accept inviteId as the caller and join the invite's team."""
    if not body.invite_id:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="inviteId is required.").model_dump(),
        )

    roster: RosterStore = request.app.state.roster
    invite = roster.accept_invite(body.invite_id, caller_id)
    if invite is None:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="not_found", message="Invite not found.").model_dump(),
        )

    roster.add_team_member(invite.team_id, caller_id)
    logger.info("Invite %s accepted by %s (team %s)", invite.id, caller_id, invite.team_id)
    return InviteResponse.from_invite(invite)
