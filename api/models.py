"""
API request and response models for TeamHub REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
roster/models.py, which own the internal domain representation. Route handlers
map between the two.

Wire format is camelCase (targetUserId, teamId, ...) to match the dashboard's
JavaScript. The alias generator maps it onto snake_case attributes; FastAPI
serializes response models by alias.

Required request fields are declared Optional on purpose: the routes report a
missing or empty field as 400 missing_fields after the role check, rather
than as a 422 validation error before it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import User
from roster.models import Invite, Player, Team

# ---------------------------------------------------------------------------
# Base configs
# ---------------------------------------------------------------------------

_REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
_RESPONSE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

_Id = Optional[str]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RoleUpdateRequest(BaseModel):
    """Request body for POST /api/admin/users/role."""

    model_config = _REQUEST_CONFIG

    target_user_id: _Id = None
    role: Optional[str] = None


class InviteCreateRequest(BaseModel):
    """Request body for POST /api/invites. The email is stored as given."""

    model_config = _REQUEST_CONFIG

    email: Optional[str] = None
    team_id: _Id = None


class InviteAcceptRequest(BaseModel):
    """Request body for POST /api/invites/accept."""

    model_config = _REQUEST_CONFIG

    invite_id: _Id = None


class PlayerAssignRequest(BaseModel):
    """Request body for POST /api/players/assign."""

    model_config = _REQUEST_CONFIG

    player_id: _Id = None
    team_id: _Id = None


class TeamCreateRequest(BaseModel):
    """Request body for POST /api/teams."""

    model_config = _REQUEST_CONFIG

    name: Optional[str] = None


class PlayerCreateRequest(BaseModel):
    """Request body for POST /api/players. teamId is optional and not looked up."""

    model_config = _REQUEST_CONFIG

    name: Optional[str] = None
    position: Optional[str] = None
    team_id: _Id = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: int
    external_id: str
    email: str
    name: str
    role: str
    created_at: str
    team_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_user(cls, user: User, team_ids: Optional[list[str]] = None) -> "UserResponse":
        """Build a UserResponse from an auth User, optionally with its team memberships."""
        return cls(
            id=user.id,
            external_id=user.external_id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=user.created_at or "",
            team_ids=team_ids or [],
        )


class InviteResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: str
    email: str
    team_id: str
    invited_by: str
    status: str
    accepted: bool
    receiver_id: Optional[str]
    created_at: str
    accepted_at: Optional[str]

    @classmethod
    def from_invite(cls, invite: Invite) -> "InviteResponse":
        return cls(
            id=invite.id,
            email=invite.email,
            team_id=invite.team_id,
            invited_by=invite.invited_by,
            status=invite.status,
            accepted=invite.accepted,
            receiver_id=invite.receiver_id,
            created_at=invite.created_at,
            accepted_at=invite.accepted_at,
        )


class InviteListRow(InviteResponse):
    """One row of GET /api/invites/list -- the invite plus its team's display name."""

    team_name: Optional[str] = None


class TeamResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: str
    name: str
    created_at: str

    @classmethod
    def from_team(cls, team: Team) -> "TeamResponse":
        return cls(id=team.id, name=team.name, created_at=team.created_at)


class PlayerResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: str
    name: str
    position: Optional[str]
    team_id: Optional[str]
    created_at: str

    @classmethod
    def from_player(cls, player: Player) -> "PlayerResponse":
        return cls(
            id=player.id,
            name=player.name,
            position=player.position,
            team_id=player.team_id,
            created_at=player.created_at,
        )


class WebhookAck(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
