#!/usr/bin/env python3
"""
TeamHub -- management commands.

Bootstraps data the web app cannot create on its own: the first ADMIN (role
changes require an existing admin), teams and players, and development
session tokens for local sign-in when no hosted identity provider is wired up.

Usage:
  python main.py create-user user_2abc coach@club.se --name "Ana Coach" --role COACH
  python main.py set-role user_2abc ADMIN
  python main.py list-users
  python main.py create-team "U17 Boys"
  python main.py create-player "Kim Lind" --position MF --team <team-id>
  python main.py token user_2abc

Environment variables:
  AUTH_DB_URL / ROSTER_DB_URL   SQLAlchemy URLs (default: SQLite files next to the stores)
  SECRET_KEY                    Session signing key (or DEBUG=true for a throwaway key)
"""

import argparse
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import DEFAULT_ROLE, User
from auth.store import UserStore
from core.config import get_settings
from roster.models import Player, Team
from roster.store import RosterStore


def _open_user_store() -> UserStore:
    url = get_settings().auth_db_url
    return UserStore(url) if url else UserStore()


def _open_roster() -> RosterStore:
    url = get_settings().roster_db_url
    return RosterStore(url) if url else RosterStore()


def cmd_create_user(args: argparse.Namespace) -> int:
    store = _open_user_store()
    try:
        store.create_user(User(external_id=args.external_id, email=args.email, name=args.name, role=args.role))
    except IntegrityError:
        print(f"  [!] A user with id '{args.external_id}' already exists.")
        return 1
    finally:
        store.close()
    print(f"  Created {args.external_id} ({args.email}) with role {args.role}.")
    return 0


def cmd_set_role(args: argparse.Namespace) -> int:
    store = _open_user_store()
    try:
        updated = store.update_role(args.external_id, args.role)
    finally:
        store.close()
    if not updated:
        print(f"  [!] No user with id '{args.external_id}'.")
        return 1
    print(f"  {args.external_id} is now {args.role}.")
    return 0


def cmd_list_users(args: argparse.Namespace) -> int:
    store = _open_user_store()
    try:
        users = store.list_users()
    finally:
        store.close()
    if not users:
        print("  No users yet.")
        return 0
    for u in users:
        print(f"  {u.external_id:<32} {u.role:<8} {u.email}  {u.name}")
    return 0


def cmd_create_team(args: argparse.Namespace) -> int:
    roster = _open_roster()
    try:
        team_id = roster.create_team(Team(name=args.name, id=args.id))
    except IntegrityError:
        print(f"  [!] A team with id '{args.id}' already exists.")
        return 1
    finally:
        roster.close()
    print(f"  Created team {args.name!r} with id {team_id}.")
    return 0


def cmd_create_player(args: argparse.Namespace) -> int:
    roster = _open_roster()
    try:
        player_id = roster.create_player(Player(name=args.name, position=args.position, team_id=args.team, id=args.id))
    except IntegrityError:
        print(f"  [!] A player with id '{args.id}' already exists.")
        return 1
    finally:
        roster.close()
    print(f"  Created player {args.name!r} with id {player_id}.")
    return 0


def cmd_token(args: argparse.Namespace) -> int:
    # Imported here: auth.tokens reads the signing key at import time.
    from auth.tokens import create_session_token

    print(create_session_token(args.external_id, expire_seconds=args.expires))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamhub",
        description="TeamHub management commands.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("create-user", help="Provision a user record for an identity-provider id")
    p.add_argument("external_id", help="Identity-provider user id (the session 'sub' claim)")
    p.add_argument("email")
    p.add_argument("--name", default="")
    p.add_argument("--role", default=DEFAULT_ROLE, help=f"Role string (default: {DEFAULT_ROLE})")
    p.set_defaults(func=cmd_create_user)

    p = sub.add_parser("set-role", help="Overwrite a user's role")
    p.add_argument("external_id")
    p.add_argument("role")
    p.set_defaults(func=cmd_set_role)

    p = sub.add_parser("list-users", help="List all users, newest first")
    p.set_defaults(func=cmd_list_users)

    p = sub.add_parser("create-team", help="Create a team")
    p.add_argument("name")
    p.add_argument("--id", default=None, help="Team id (default: generated)")
    p.set_defaults(func=cmd_create_team)

    p = sub.add_parser("create-player", help="Create a player, optionally on a team")
    p.add_argument("name")
    p.add_argument("--position", default=None)
    p.add_argument("--team", default=None, metavar="TEAM_ID")
    p.add_argument("--id", default=None, help="Player id (default: generated)")
    p.set_defaults(func=cmd_create_player)

    p = sub.add_parser("token", help="Print a development session token for a user id")
    p.add_argument("external_id")
    p.add_argument("--expires", type=int, default=0, metavar="SECONDS", help="Lifetime (default: TOKEN_EXPIRE_SECONDS)")
    p.set_defaults(func=cmd_token)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
