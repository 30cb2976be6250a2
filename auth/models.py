"""
auth/models.py -- Domain dataclasses for identity entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work.

Layer rule: no imports from api/, web/ or roster/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_ADMIN = "ADMIN"
ROLE_COACH = "COACH"
ROLE_SCOUT = "SCOUT"

DEFAULT_ROLE = ROLE_SCOUT
STAFF_ROLES = frozenset({ROLE_ADMIN, ROLE_COACH})


@dataclass
class User:
    """A person known to TeamHub.

    external_id is the identity provider's stable user id. It is the JWT "sub"
    claim on every session token and the key all routes use to find the user.
    id is the internal primary key, None before the record is written.

    role is a free-form string. ADMIN and COACH are the only values the
    permission checks look for; anything else behaves like the default.
    """

    external_id: str
    email: str
    name: str = ""
    role: str = DEFAULT_ROLE
    id: int | None = None
    created_at: str | None = None
