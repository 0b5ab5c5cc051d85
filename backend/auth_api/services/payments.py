"""Payment provider webhook relay: verify the signature over the raw body, then hand the event on."""

import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from auth_api.core.config import Settings
from auth_api.core.errors import BadRequestError, InternalServerError, ServiceUnavailableError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Stripe-Signature"
FORWARD_TIMEOUT_SECONDS = 10


def compute_signature(secret: str, timestamp: int, payload: bytes) -> str:
    """HMAC SHA256 over "<timestamp>.<payload>", hex encoded."""
    message = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def _parse_signature_header(header: str) -> Dict[str, list]:
    parts: Dict[str, list] = {}
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts.setdefault(key, []).append(value)
    return parts


def verify_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance_seconds: int = 300,
    now: Optional[int] = None,
) -> int:
    """Check a ``t=<unix>,v1=<hex>`` header against the exact payload bytes. Returns the signed timestamp."""
    if not header:
        raise BadRequestError("Missing webhook signature")
    parts = _parse_signature_header(header)
    try:
        timestamp = int(parts["t"][0])
    except (KeyError, ValueError):
        raise BadRequestError("Malformed webhook signature")
    candidates = parts.get("v1", [])
    if not candidates:
        raise BadRequestError("Malformed webhook signature")

    now = int(time.time()) if now is None else now
    if abs(now - timestamp) > tolerance_seconds:
        raise BadRequestError("Webhook signature timestamp outside tolerance")

    expected = compute_signature(secret, timestamp, payload)
    if not any(hmac.compare_digest(expected, c) for c in candidates):
        raise BadRequestError("Webhook signature mismatch")
    return timestamp


def relay_event(payload: bytes, signature_header: Optional[str], app_settings: Settings) -> Dict[str, Any]:
    if not app_settings.PAYMENT_WEBHOOK_SECRET:
        raise ServiceUnavailableError("Payment webhook not configured")

    verify_signature(
        payload,
        signature_header,
        app_settings.PAYMENT_WEBHOOK_SECRET,
        app_settings.PAYMENT_WEBHOOK_TOLERANCE_SECONDS,
    )
    try:
        event = json.loads(payload)
    except ValueError:
        raise BadRequestError("Webhook payload is not valid JSON")
    if not isinstance(event, dict):
        raise BadRequestError("Webhook payload is not valid JSON")

    event_id = event.get("id")
    event_type = event.get("type")
    logger.info("Payment event %s received (type=%s)", event_id, event_type)

    forwarded = False
    if app_settings.PAYMENT_WEBHOOK_FORWARD_URL:
        try:
            resp = httpx.post(
                app_settings.PAYMENT_WEBHOOK_FORWARD_URL,
                content=payload,
                headers={
                    "Content-Type": "application/json",
                    SIGNATURE_HEADER: signature_header,
                },
                timeout=FORWARD_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.exception("Relaying payment event %s failed", event_id)
            raise InternalServerError("Unable to relay payment event") from e
        forwarded = True
        logger.info("Payment event %s relayed", event_id)

    return {"received": True, "id": event_id, "type": event_type, "forwarded": forwarded}
