"""
auth/tokens.py -- Session token utilities.

Sessions are issued by the hosted identity provider as signed JWTs. TeamHub
only verifies them; the `sub` claim carries the provider's user id (the
User.external_id). create_session_token() exists for the management CLI and
for tests, which need to mint sessions without the provider.

Security design decisions:
  JWT: python-jose with HS256, signed with SECRET_KEY. Verification returns
       None on any failure -- the dependency layer turns that into a 401.
  Issuer: when SESSION_ISSUER is configured the "iss" claim must match it.

Layer rule: no imports from api/, web/ or roster/. Import from core/ is
allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.config import get_settings

logger = logging.getLogger("teamhub.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# Cookie name the identity provider's frontend SDK writes the session JWT to.
SESSION_COOKIE = "__session"


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_session_token(external_id: str, expire_seconds: int = 0) -> str:
    """Encode a signed session JWT for the given identity-provider user id.

    Args:
        external_id:    Provider user id, stored as the "sub" claim.
        expire_seconds: Session duration in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    now = datetime.now(timezone.utc)
    payload = {
        "sub": external_id,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
    }
    if _settings.session_issuer:
        payload["iss"] = _settings.session_issuer
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_session_token(token: str) -> dict | None:
    """Decode and verify a session JWT. Returns the payload dict or None on any failure."""
    options = {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            issuer=_settings.session_issuer or None,
            options=options,
        )
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_session_cookie(response, token: str, expire_seconds: int = 0) -> None:
    """Write the session JWT as an httpOnly cookie on the response.

    Used by the development sign-in flow; in production the provider's
    frontend SDK owns this cookie.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    response.set_cookie(
        SESSION_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=duration,
    )
