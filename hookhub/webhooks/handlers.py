"""Webhook signature validation for GitHub deliveries."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

from hookhub.errors import MalformedRequest, Unauthorized
from hookhub.models import IncomingEvent
from hookhub.utils.logging import get_logger

log = get_logger(__name__)

# "sha1=" plus at least 35 hex chars; a full SHA-1 signature is 45
MIN_SIGNATURE_LENGTH = 40


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------

def check_preconditions(
    signature: str | None, event_type: str | None, body: bytes | None
) -> None:
    """Reject requests missing the signature, event type or body.

    Raises MalformedRequest on the first failing check.
    """
    if signature is None or len(signature) < MIN_SIGNATURE_LENGTH:
        raise MalformedRequest()
    if not event_type:
        raise MalformedRequest()
    if not body:
        raise MalformedRequest()


# ---------------------------------------------------------------------------
# Signature validation
# ---------------------------------------------------------------------------

def compute_signature(body: bytes, secret: str) -> str:
    """Render the X-Hub-Signature value GitHub sends for ``body``."""
    return "sha1=" + hmac.new(secret.encode(), body, hashlib.sha1).hexdigest()


def validate_github_signature(body: bytes, signature: str, secret: str) -> bool:
    """Validate GitHub webhook HMAC-SHA1 signature.

    Returns False if no secret is configured (rejects unauthenticated requests).
    """
    if not secret:
        return False
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(body, secret), signature)


def verify_request(
    signature: str | None,
    event_type: str | None,
    body: bytes | None,
    secret: str,
    reject_status: int | None = None,
) -> IncomingEvent:
    """Run the full gate over a delivery and return the parsed event.

    The HMAC is checked against the raw bytes before anything is parsed.
    """
    check_preconditions(signature, event_type, body)

    if not validate_github_signature(body, signature, secret):
        log.warning(
            "webhook_signature_rejected",
            event_type=event_type,
            body_length=len(body),
        )
        raise Unauthorized(status=reject_status)

    try:
        payload: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise MalformedRequest() from None
    if not isinstance(payload, dict):
        raise MalformedRequest()

    return IncomingEvent(
        event_type=event_type,
        raw_body=body,
        payload=payload,
        signature=signature,
    )
