"""
auth/webhooks.py -- Verification of identity-provider webhook deliveries.

The provider delivers user lifecycle events (user.created, ...) through Svix.
Each delivery carries three headers:

  svix-id         -- unique message id
  svix-timestamp  -- unix seconds when the message was signed
  svix-signature  -- space-separated list of "v1,<base64 signature>"

Signature, header and timestamp-tolerance checks are done by the svix
library. This module only adds the rule that the event must be a JSON object
and folds every rejection into svix's WebhookVerificationError.

Layer rule: no imports from api/, web/ or roster/.
"""

from __future__ import annotations

from collections.abc import Mapping

from svix.webhooks import Webhook, WebhookVerificationError

__all__ = ["WebhookVerificationError", "verify_webhook"]


def verify_webhook(secret: str, payload: bytes, headers: Mapping[str, str]) -> dict:
    """Verify a webhook delivery and return the decoded JSON event.

    Raises WebhookVerificationError on a missing header, a stale timestamp,
    a signature mismatch or a body that is not a JSON object.
    """
    try:
        event = Webhook(secret).verify(payload, dict(headers))
    except ValueError as exc:
        # Undecodable signature or body that passed the signature check.
        raise WebhookVerificationError("Malformed webhook delivery.") from exc
    if not isinstance(event, dict):
        raise WebhookVerificationError("Webhook body is not a JSON object.")
    return event
