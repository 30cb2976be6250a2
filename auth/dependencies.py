"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

A session token is accepted from two places, checked in priority order:
  1. "__session" cookie -- written by the identity provider's frontend SDK.
  2. Authorization: Bearer <token> header -- API clients and scripts.

Both converge on the caller's external id (the JWT "sub" claim).

try_get_session_id() is the soft variant (returns None on failure).
get_session_id() wraps it and raises HTTP 401 if unauthenticated.
require_roles(...) builds a dependency that loads the caller's User record
and raises HTTP 403 unless its role is one of the given roles. A caller with
a valid session but no User record is also 403.

Layer rule: no imports from web/ or roster/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import HTTPException, Request

from auth.models import ROLE_ADMIN, STAFF_ROLES, User
from auth.tokens import SESSION_COOKIE, decode_session_token


def try_get_session_id(request: Request) -> str | None:
    """Return the caller's external id from a valid session token, or None.

    Never raises -- callers that need a hard 401 should use get_session_id().
    """
    # 1. Cookie (browser session)
    token: str | None = request.cookies.get(SESSION_COOKIE)

    # 2. Authorization: Bearer header (API clients)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]

    if not token:
        return None
    payload = decode_session_token(token)
    if payload is None:
        return None
    return payload["sub"]


def try_get_current_user(request: Request) -> User | None:
    """Return the caller's User record, or None if unauthenticated or not provisioned."""
    external_id = try_get_session_id(request)
    if external_id is None:
        return None
    return request.app.state.user_store.get_by_external_id(external_id)


def get_session_id(request: Request) -> str:
    """Require authentication. Raises HTTP 401 if the request carries no valid session.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(caller_id: str = Depends(get_session_id)): ...
    """
    external_id = try_get_session_id(request)
    if external_id is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return external_id


def require_roles(*roles: str) -> Callable[[Request], User]:
    """Build a dependency that requires the caller's role to be one of `roles`.

    Raises HTTP 401 if unauthenticated, HTTP 403 if the caller has no User
    record or holds a different role.
    """
    allowed = frozenset(roles)

    def dependency(request: Request) -> User:
        external_id = get_session_id(request)
        user = request.app.state.user_store.get_by_external_id(external_id)
        if user is None or user.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Insufficient role for this action."},
            )
        return user

    return dependency


require_admin = require_roles(ROLE_ADMIN)
require_staff = require_roles(*STAFF_ROLES)
