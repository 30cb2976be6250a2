"""
web/routes.py -- Jinja2 template routes for the TeamHub dashboard.

These routes serve server-rendered HTML. They share app.state with the API
routes (same identity and roster stores) but return HTML instead of JSON.
Pages only read; every mutation (role change, invite, accept, assignment) is
sent by the page's script to the JSON API with the same session cookie, so
the permission checks live in one place.

Routes:
  GET  /sign-in                  -- hosted sign-in redirect, or local notice page
  POST /sign-in/token            -- store a pasted session token as the cookie
  GET  /sign-up                  -- hosted sign-up redirect, or local notice page
  POST /sign-out                 -- clear the session cookie
  GET  /dashboard                -- overview: counts and position radar chart
  GET  /dashboard/admin          -- user table with role selector (ADMIN)
  GET  /dashboard/invites        -- caller's pending invites
  GET  /dashboard/invites/send   -- invite form (ADMIN, COACH)
  GET  /dashboard/players        -- player table with team assignment
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from auth.dependencies import try_get_current_user, try_get_session_id
from auth.models import ROLE_ADMIN, ROLE_COACH, ROLE_SCOUT, STAFF_ROLES, User
from auth.tokens import SESSION_COOKIE, decode_session_token, set_session_cookie
from core.config import get_settings
from roster.store import RosterStore

logger = logging.getLogger("teamhub.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

_ROLE_CHOICES = [ROLE_SCOUT, ROLE_COACH, ROLE_ADMIN]

# Whitelist for ?error= on /sign-in. The raw query param never reaches templates.
_ERROR_MESSAGES: dict[str, str] = {
    "bad_token": "That session token is invalid or expired.",
}


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def _safe_next(next_url: Optional[str]) -> str:
    """Validate a post-sign-in redirect target. Only accept server-local paths.

    Rejects absolute URLs and protocol-relative "//host" values so the
    parameter cannot bounce a user off-site.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/dashboard"


def _require_session(request: Request) -> Optional[RedirectResponse]:
    """Return a redirect to /sign-in if the request has no valid session, else None.

    Call at the top of protected page handlers:
        if redirect := _require_session(request):
            return redirect
    """
    if try_get_session_id(request) is None:
        return RedirectResponse(f"/sign-in?{urlencode({'next': request.url.path})}", status_code=302)
    return None


def _forbidden(request: Request, user: Optional[User]) -> HTMLResponse:
    return templates.TemplateResponse(
        "forbidden.html",
        {"request": request, "user": user},
        status_code=403,
    )


def _hosted_redirect(base_url: str, next_url: str) -> RedirectResponse:
    separator = "&" if "?" in base_url else "?"
    return RedirectResponse(f"{base_url}{separator}{urlencode({'redirect_url': next_url})}", status_code=302)


# ---------------------------------------------------------------------------
# Sign-in / sign-up
# ---------------------------------------------------------------------------


@router.get("/sign-in", response_class=HTMLResponse)
def sign_in(request: Request, next: Optional[str] = None, error: Optional[str] = None) -> HTMLResponse:
    target = _safe_next(next)
    if try_get_session_id(request) is not None:
        return RedirectResponse(target, status_code=302)
    settings = get_settings()
    if settings.sign_in_url:
        return _hosted_redirect(settings.sign_in_url, target)
    return templates.TemplateResponse(
        "sign_in.html",
        {"request": request, "mode": "sign-in", "next": target, "error": _ERROR_MESSAGES.get(error or "")},
    )


@router.post("/sign-in/token", response_class=HTMLResponse)
def sign_in_with_token(request: Request, token: str = Form(...), next: str = Form("/dashboard")) -> RedirectResponse:
    """Accept a session token minted by `python main.py token` and store it as the cookie.

    The token itself is the credential: it is verified exactly like a Bearer
    header before the cookie is written.
    """
    token = token.strip()
    if decode_session_token(token) is None:
        query = urlencode({"error": "bad_token", "next": _safe_next(next)})
        return RedirectResponse(f"/sign-in?{query}", status_code=303)
    resp = RedirectResponse(_safe_next(next), status_code=303)
    set_session_cookie(resp, token)
    return resp


@router.get("/sign-up", response_class=HTMLResponse)
def sign_up(request: Request) -> HTMLResponse:
    if try_get_session_id(request) is not None:
        return RedirectResponse("/dashboard", status_code=302)
    settings = get_settings()
    if settings.sign_up_url:
        return _hosted_redirect(settings.sign_up_url, "/dashboard")
    return templates.TemplateResponse(
        "sign_in.html",
        {"request": request, "mode": "sign-up", "next": "/dashboard", "error": None},
    )


@router.post("/sign-out")
def sign_out() -> RedirectResponse:
    resp = RedirectResponse("/sign-in", status_code=303)
    resp.delete_cookie(SESSION_COOKIE)
    return resp


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request) -> HTMLResponse:
    if redirect := _require_session(request):
        return redirect
    roster: RosterStore = request.app.state.roster
    positions = roster.count_players_by_position()
    chart_data = [{"category": k, "value": v} for k, v in sorted(positions.items())]
    return templates.TemplateResponse(
        "dashboard.html",
        {
            "request": request,
            "user": try_get_current_user(request),
            "counts": roster.get_counts(),
            "chart_data": chart_data,
        },
    )


@router.get("/dashboard/admin", response_class=HTMLResponse)
def admin_page(request: Request) -> HTMLResponse:
    if redirect := _require_session(request):
        return redirect
    user = try_get_current_user(request)
    if user is None or user.role != ROLE_ADMIN:
        return _forbidden(request, user)
    return templates.TemplateResponse(
        "admin.html",
        {
            "request": request,
            "user": user,
            "users": request.app.state.user_store.list_users(),
            "roles": _ROLE_CHOICES,
        },
    )


@router.get("/dashboard/invites", response_class=HTMLResponse)
def invites_page(request: Request) -> HTMLResponse:
    if redirect := _require_session(request):
        return redirect
    user = try_get_current_user(request)
    roster: RosterStore = request.app.state.roster
    team_names = {t.id: t.name for t in roster.list_teams()}
    invites = roster.list_pending_invites_for_email(user.email) if user else []
    rows = [{"id": inv.id, "team": team_names.get(inv.team_id, inv.team_id), "status": inv.status} for inv in invites]
    return templates.TemplateResponse("invites.html", {"request": request, "user": user, "invites": rows})


@router.get("/dashboard/invites/send", response_class=HTMLResponse)
def invite_send_page(request: Request) -> HTMLResponse:
    if redirect := _require_session(request):
        return redirect
    user = try_get_current_user(request)
    if user is None or user.role not in STAFF_ROLES:
        return _forbidden(request, user)
    roster: RosterStore = request.app.state.roster
    return templates.TemplateResponse(
        "invite_send.html",
        {"request": request, "user": user, "teams": roster.list_teams()},
    )


@router.get("/dashboard/players", response_class=HTMLResponse)
def players_page(request: Request, team: Optional[str] = None) -> HTMLResponse:
    if redirect := _require_session(request):
        return redirect
    user = try_get_current_user(request)
    roster: RosterStore = request.app.state.roster
    teams = roster.list_teams()
    team_names = {t.id: t.name for t in teams}
    players = roster.list_players(team_id=team or None)
    rows = [
        {
            "id": p.id,
            "Name": p.name,
            "Position": p.position or "-",
            "Team": team_names.get(p.team_id, p.team_id or "Unassigned"),
            "team_id": p.team_id,
        }
        for p in players
    ]
    return templates.TemplateResponse(
        "players.html",
        {
            "request": request,
            "user": user,
            "players": rows,
            "teams": teams,
            "selected_team": team,
            "can_assign": user is not None and user.role in STAFF_ROLES,
        },
    )
