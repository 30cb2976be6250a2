"""
tests/conftest.py -- Shared test fixtures for TeamHub integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for identity + roster
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - app_client: TestClient over the full app (API + web pages) with three
    provisioned users -- an ADMIN, a COACH and a SCOUT
  - auth_headers: builds an Authorization header for any external id

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment variables must be set before any auth/core import so
get_settings() sees them: DEBUG generates a SECRET_KEY, WEBHOOK_SECRET lets
the webhook route verify signed test deliveries, and WRITE_RATE_LIMIT keeps
the shared in-memory limiter from throttling the suite.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("WEBHOOK_SECRET", "whsec_dGVhbWh1Yi10ZXN0LXdlYmhvb2stc2VjcmV0LWtleQ==")
os.environ.setdefault("WRITE_RATE_LIMIT", "10000/minute")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.models import ROLE_ADMIN, ROLE_COACH, ROLE_SCOUT, User
from auth.store import UserStore
from auth.tokens import create_session_token
from roster.store import RosterStore

ADMIN_ID = "user_admin"
COACH_ID = "user_coach"
SCOUT_ID = "user_scout"

SEED_USERS = [
    User(external_id=ADMIN_ID, email="admin@club.se", name="Alex Admin", role=ROLE_ADMIN),
    User(external_id=COACH_ID, email="coach@club.se", name="Cora Coach", role=ROLE_COACH),
    User(external_id=SCOUT_ID, email="scout@club.se", name="Sam Scout", role=ROLE_SCOUT),
]


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, RosterStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't share state.
    """
    auth_url = f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true"
    roster_url = f"sqlite:///file:test_roster_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=auth_url), RosterStore(db_url=roster_url)


def _patch_lifespan(user_store: UserStore, roster: RosterStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.roster = roster
        yield

    return test_lifespan


def bearer(external_id: str) -> dict[str, str]:
    token = create_session_token(external_id, expire_seconds=3600)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stores() -> Generator[tuple[UserStore, RosterStore], None, None]:
    """Fresh identity + roster stores with the three seed users provisioned."""
    user_store, roster = _make_test_stores(uuid.uuid4().hex)
    for user in SEED_USERS:
        user_store.create_user(User(**vars(user)))
    yield user_store, roster
    user_store.close()
    roster.close()


@pytest.fixture
def app_client(
    stores: tuple[UserStore, RosterStore],
) -> Generator[tuple[TestClient, UserStore, RosterStore], None, None]:
    """Yield (client, user_store, roster) over the real app with a patched lifespan.

    follow_redirects=False so page tests can assert on redirect locations.
    """
    user_store, roster = stores
    app.router.lifespan_context = _patch_lifespan(user_store, roster)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client, user_store, roster


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Return a function mapping an external id to a Bearer Authorization header."""
    return bearer
