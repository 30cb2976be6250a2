"""
api/routes/webhooks.py -- Identity-provider webhook receiver.

Routes:
  POST /api/webhooks/identity  -- user lifecycle events from the hosted provider

Only user.created is acted on: it provisions a User with the default role
so the person can be promoted from the admin page. Every other verified
event is acknowledged and ignored, so the provider does not retry it.

Public endpoint -- authenticity comes from the signature headers, not from a
session. See auth/webhooks.py for the verification scheme.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.models import ErrorDetail, WebhookAck
from auth.models import DEFAULT_ROLE, User
from auth.store import UserStore
from auth.webhooks import WebhookVerificationError, verify_webhook
from core.config import get_settings

logger = logging.getLogger("teamhub.api.webhooks")

router = APIRouter()


@router.post("/webhooks/identity", response_model=WebhookAck)
async def identity_webhook(request: Request) -> WebhookAck:
    """Verify a provider delivery and provision the user on user.created."""
    secret = get_settings().webhook_secret
    if not secret:
        logger.error("WEBHOOK_SECRET is not configured; rejecting identity webhook")
        raise HTTPException(
            status_code=500,
            detail=ErrorDetail(
                code="webhook_not_configured",
                message="Webhook secret is not configured.",
            ).model_dump(),
        )

    payload = await request.body()
    try:
        event = verify_webhook(secret, payload, request.headers)
    except WebhookVerificationError as exc:
        logger.warning("Rejected identity webhook: %s", exc)
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="invalid_webhook", message=str(exc)).model_dump(),
        ) from exc

    if event.get("type") != "user.created":
        return WebhookAck()

    user = _user_from_event(event.get("data"))
    user_store: UserStore = request.app.state.user_store
    try:
        user_store.create_user(user)
    except IntegrityError:
        # Redelivery of an event we already processed.
        logger.info("User %s already provisioned; ignoring duplicate user.created", user.external_id)
        return WebhookAck()

    logger.info("Provisioned user %s with role %s", user.external_id, user.role)
    return WebhookAck()


def _user_from_event(data) -> User:
    """Map a user.created payload onto a User. Raises HTTP 400 if id or email is missing."""
    if not isinstance(data, dict):
        data = {}
    external_id = data.get("id")
    addresses = data.get("email_addresses")
    first = addresses[0] if isinstance(addresses, list) and addresses else None
    email = first.get("email_address") if isinstance(first, dict) else None
    if not (isinstance(external_id, str) and external_id and isinstance(email, str) and email):
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(
                code="invalid_event",
                message="user.created requires id and an email address.",
            ).model_dump(),
        )
    name = f"{data.get('first_name') or ''} {data.get('last_name') or ''}".strip()
    return User(external_id=external_id, email=email, name=name, role=DEFAULT_ROLE)
