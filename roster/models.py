"""
roster/models.py -- Domain dataclasses for teams, players and invites.

These are pure data containers with zero logic. All persistence lives in
roster/store.py; authorization lives in auth/dependencies.py.

id is None before the record is written to the database. Ids are opaque
strings so callers may bring their own (e.g. imported club data).
"""

from dataclasses import dataclass
from typing import Optional

INVITE_PENDING = "PENDING"
INVITE_ACCEPTED = "ACCEPTED"


@dataclass
class Team:
    name: str
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Player:
    """A player on (at most) one team. team_id is None for unassigned players."""

    name: str
    position: Optional[str] = None  # "GK" | "DF" | "MF" | "FW", free-form
    team_id: Optional[str] = None
    id: Optional[str] = None
    created_at: str = ""


@dataclass
class Invite:
    """A pending association between an email address and a team.

    invited_by  -- external id of the staff member who sent it
    receiver_id -- external id of whoever accepted it, None while pending

    status and accepted move together on acceptance. Both are kept because
    the dashboard filters on status while API clients read the flag.
    """

    email: str
    team_id: str
    invited_by: str
    status: str = INVITE_PENDING
    accepted: bool = False
    receiver_id: Optional[str] = None
    id: Optional[str] = None
    created_at: str = ""
    accepted_at: Optional[str] = None
