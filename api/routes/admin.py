"""
api/routes/admin.py -- User administration routes.

Routes:
  GET  /api/admin/users       -- list all users with team memberships (admin only)
  POST /api/admin/users/role  -- overwrite a user's role (admin only)

The role string is written as given. Only ADMIN and COACH carry meaning in
the permission checks; any other value behaves like the default role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ErrorDetail, RoleUpdateRequest, UserResponse
from auth.dependencies import require_admin
from auth.models import User
from auth.store import UserStore
from core.config import get_settings
from roster.store import RosterStore

logger = logging.getLogger("teamhub.api.admin")

# Auth policy:
# - GET  /api/admin/users:       requires admin -- router-level dependency
# - POST /api/admin/users/role:  requires admin -- handler receives the admin User
router = APIRouter(dependencies=[Depends(require_admin)])

_WRITE_LIMIT = get_settings().write_rate_limit


@router.get("/admin/users", response_model=list[UserResponse])
def list_users(request: Request) -> list[UserResponse]:
    """Return all users, newest first, each with the ids of the teams they belong to."""
    user_store: UserStore = request.app.state.user_store
    roster: RosterStore = request.app.state.roster

    users = user_store.list_users()
    memberships = roster.get_team_ids_by_user(u.external_id for u in users)
    return [UserResponse.from_user(u, memberships.get(u.external_id, [])) for u in users]


@limiter.limit(_WRITE_LIMIT)
@router.post("/admin/users/role", response_model=UserResponse)
def update_role(
    request: Request,
    body: RoleUpdateRequest,
    admin: User = Depends(require_admin),
) -> UserResponse:
    """Set targetUserId's role. Both fields are required; the target is an external id."""
    if not body.target_user_id or not body.role:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="missing_fields", message="targetUserId and role are required.").model_dump(),
        )

    user_store: UserStore = request.app.state.user_store
    if not user_store.update_role(body.target_user_id, body.role):
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="not_found", message="User not found.").model_dump(),
        )

    logger.info("Role of %s set to %s by %s", body.target_user_id, body.role, admin.external_id)
    updated = user_store.get_by_external_id(body.target_user_id)
    roster: RosterStore = request.app.state.roster
    team_ids = roster.get_team_ids_by_user([updated.external_id]).get(updated.external_id, [])
    return UserResponse.from_user(updated, team_ids)
