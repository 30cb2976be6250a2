"""
roster/store.py -- SQLAlchemy-backed persistence layer for TeamHub rosters.

Uses SQLAlchemy Core (not ORM) so the dataclasses in roster/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. RosterStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Route
handlers never touch SQL directly.

Every mutating method is a single-statement write committed on its own.
Invite acceptance and the membership write that follows it are two separate
calls; a failure between them leaves an accepted invite without membership.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = RosterStore()                               # SQLite default
    store = RosterStore("postgresql://user:pw@host/db") # PostgreSQL
    team_id = store.create_team(Team(name="U17"))
    player = store.assign_player(player_id, team_id)
    store.close()
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    event,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from roster.models import INVITE_ACCEPTED, INVITE_PENDING, Invite, Player, Team

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'teamhub_roster.db'}"

logger = logging.getLogger("teamhub.roster")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_teams = Table(
    "teams",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_players = Table(
    "players",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("position", String(30)),
    Column("team_id", String(64)),  # no FK: assignment does not check the team exists
    Column("created_at", String(32), nullable=False),
)

_invites = Table(
    "invites",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("email", String(255), nullable=False),
    Column("team_id", String(64), nullable=False),
    Column("invited_by", String(255), nullable=False),
    Column("status", String(20), nullable=False, server_default=INVITE_PENDING),
    Column("accepted", Integer, nullable=False, server_default="0"),
    Column("receiver_id", String(255)),
    Column("created_at", String(32), nullable=False),
    Column("accepted_at", String(32)),
)

_team_members = Table(
    "team_members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("team_id", String(64), nullable=False),
    Column("user_id", String(255), nullable=False),  # member's external id
    Column("joined_at", String(32), nullable=False),
    UniqueConstraint("team_id", "user_id", name="uq_team_member"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RosterStore:
    """Repository for Team, Player, Invite and team membership."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def create_team(self, team: Team) -> str:
        """Insert a team and return its id."""
        team_id = team.id or _new_id()
        with self.engine.connect() as conn:
            conn.execute(_teams.insert().values(id=team_id, name=team.name, created_at=_now_iso()))
            conn.commit()
        return team_id

    def get_team(self, team_id: str) -> Optional[Team]:
        with self.engine.connect() as conn:
            row = conn.execute(_teams.select().where(_teams.c.id == team_id)).fetchone()
        return _row_to_team(row) if row is not None else None

    def list_teams(self) -> list[Team]:
        """Return all teams ordered by name."""
        with self.engine.connect() as conn:
            rows = conn.execute(_teams.select().order_by(_teams.c.name)).fetchall()
        return [_row_to_team(r) for r in rows]

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def create_player(self, player: Player) -> str:
        """Insert a player and return its id."""
        player_id = player.id or _new_id()
        with self.engine.connect() as conn:
            conn.execute(
                _players.insert().values(
                    id=player_id,
                    name=player.name,
                    position=player.position,
                    team_id=player.team_id,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return player_id

    def get_player(self, player_id: str) -> Optional[Player]:
        with self.engine.connect() as conn:
            row = conn.execute(_players.select().where(_players.c.id == player_id)).fetchone()
        return _row_to_player(row) if row is not None else None

    def list_players(self, team_id: Optional[str] = None) -> list[Player]:
        """Return players ordered by name, optionally restricted to one team."""
        query = _players.select().order_by(_players.c.name)
        if team_id is not None:
            query = query.where(_players.c.team_id == team_id)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_player(r) for r in rows]

    def assign_player(self, player_id: str, team_id: str) -> Optional[Player]:
        """Move a player to a team. Returns the updated Player, or None if the player is unknown.

        The team is not looked up; any team id is written as given.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_players.update().where(_players.c.id == player_id).values(team_id=team_id))
            conn.commit()
        if result.rowcount == 0:
            return None
        return self.get_player(player_id)

    def count_players_by_position(self) -> dict[str, int]:
        """Return {position: count} across all players. Unset positions count as "N/A"."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_players.c.position, func.count().label("n")).group_by(_players.c.position)
            ).fetchall()
        counts: dict[str, int] = {}
        for position, n in rows:
            key = position or "N/A"
            counts[key] = counts.get(key, 0) + n
        return counts

    # ------------------------------------------------------------------
    # Invites
    # ------------------------------------------------------------------

    def create_invite(self, invite: Invite) -> Invite:
        """Insert a PENDING invite and return it as stored. No duplicate detection."""
        invite_id = invite.id or _new_id()
        with self.engine.connect() as conn:
            conn.execute(
                _invites.insert().values(
                    id=invite_id,
                    email=invite.email,
                    team_id=invite.team_id,
                    invited_by=invite.invited_by,
                    status=INVITE_PENDING,
                    accepted=0,
                    receiver_id=None,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return self.get_invite(invite_id)

    def get_invite(self, invite_id: str) -> Optional[Invite]:
        with self.engine.connect() as conn:
            row = conn.execute(_invites.select().where(_invites.c.id == invite_id)).fetchone()
        return _row_to_invite(row) if row is not None else None

    def list_invites(self) -> list[Invite]:
        """Return every invite, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_invites.select().order_by(_invites.c.created_at.desc())).fetchall()
        return [_row_to_invite(r) for r in rows]

    def list_pending_invites_for_email(self, email: str) -> list[Invite]:
        """Return PENDING invites addressed to `email` (case-insensitive), newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _invites.select()
                .where((func.lower(_invites.c.email) == email.lower()) & (_invites.c.status == INVITE_PENDING))
                .order_by(_invites.c.created_at.desc())
            ).fetchall()
        return [_row_to_invite(r) for r in rows]

    def accept_invite(self, invite_id: str, receiver_id: str) -> Optional[Invite]:
        """Mark an invite accepted by `receiver_id`. Returns the updated Invite, or None if unknown.

        Prior state is not checked: accepting twice overwrites the receiver.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _invites.update()
                .where(_invites.c.id == invite_id)
                .values(status=INVITE_ACCEPTED, accepted=1, receiver_id=receiver_id, accepted_at=_now_iso())
            )
            conn.commit()
        if result.rowcount == 0:
            return None
        return self.get_invite(invite_id)

    # ------------------------------------------------------------------
    # Team membership
    # ------------------------------------------------------------------

    def add_team_member(self, team_id: str, user_id: str) -> bool:
        """Record `user_id` as a member of `team_id`.

        Returns True if a new membership row was written, False if it already existed.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(_team_members.insert().values(team_id=team_id, user_id=user_id, joined_at=_now_iso()))
                conn.commit()
        except IntegrityError:
            return False
        return True

    def list_team_members(self, team_id: str) -> list[str]:
        """Return the external ids of a team's members in join order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_team_members.c.user_id).where(_team_members.c.team_id == team_id).order_by(_team_members.c.id)
            ).fetchall()
        return [r.user_id for r in rows]

    def get_team_ids_by_user(self, user_ids: Iterable[str]) -> dict[str, list[str]]:
        """Return {user_id: [team_id, ...]} for the given users in one query.

        Users with no memberships map to an empty list.
        """
        ids = list(user_ids)
        result: dict[str, list[str]] = {uid: [] for uid in ids}
        if not ids:
            return result
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_team_members.c.user_id, _team_members.c.team_id)
                .where(_team_members.c.user_id.in_(ids))
                .order_by(_team_members.c.id)
            ).fetchall()
        for row in rows:
            result[row.user_id].append(row.team_id)
        return result

    # ------------------------------------------------------------------
    # Dashboard counts
    # ------------------------------------------------------------------

    def get_counts(self) -> dict[str, int]:
        """Return {"teams": N, "players": N, "pending_invites": N}."""
        with self.engine.connect() as conn:
            teams = conn.execute(select(func.count()).select_from(_teams)).scalar()
            players = conn.execute(select(func.count()).select_from(_players)).scalar()
            pending = conn.execute(
                select(func.count()).select_from(_invites).where(_invites.c.status == INVITE_PENDING)
            ).scalar()
        return {"teams": teams or 0, "players": players or 0, "pending_invites": pending or 0}

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(select(1))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_team(row) -> Team:
    return Team(id=row.id, name=row.name, created_at=row.created_at)


def _row_to_player(row) -> Player:
    return Player(
        id=row.id,
        name=row.name,
        position=row.position,
        team_id=row.team_id,
        created_at=row.created_at,
    )


def _row_to_invite(row) -> Invite:
    return Invite(
        id=row.id,
        email=row.email,
        team_id=row.team_id,
        invited_by=row.invited_by,
        status=row.status,
        accepted=bool(row.accepted),
        receiver_id=row.receiver_id,
        created_at=row.created_at,
        accepted_at=row.accepted_at,
    )
