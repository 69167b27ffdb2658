"""
Stripe-style webhook signatures.

The ``Stripe-Signature`` header has the form ``t=<unix ts>,v1=<hex>`` where
the v1 value is an HMAC-SHA256 of ``"<ts>.<raw body>"`` keyed by the
endpoint secret.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any

from stripe_double.errors import SignatureVerificationError
from stripe_double.objects import StripeObject

SIGNATURE_HEADER = "Stripe-Signature"
SIGNATURE_SCHEME = "v1"
DEFAULT_TOLERANCE = 300


def _as_bytes(payload: str | bytes) -> bytes:
    return payload.encode() if isinstance(payload, str) else payload


def compute_signature(payload: str | bytes, secret: str, timestamp: int) -> str:
    signed_payload = f"{timestamp}.".encode() + _as_bytes(payload)
    return hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()


def generate_signature_header(
    payload: str | bytes,
    secret: str,
    timestamp: int | None = None,
) -> str:
    """Build a ``Stripe-Signature`` header value for a raw payload."""
    ts = int(time.time()) if timestamp is None else timestamp
    return f"t={ts},{SIGNATURE_SCHEME}={compute_signature(payload, secret, ts)}"


def _parse_header(sig_header: str) -> tuple[int, list[str]]:
    timestamp: int | None = None
    signatures: list[str] = []
    for item in sig_header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise SignatureVerificationError(
                    "Unable to extract timestamp from header", sig_header
                ) from None
        elif key == SIGNATURE_SCHEME:
            signatures.append(value)

    if timestamp is None:
        raise SignatureVerificationError("Unable to extract timestamp from header", sig_header)
    if not signatures:
        raise SignatureVerificationError(
            f"No signatures found with expected scheme {SIGNATURE_SCHEME}", sig_header
        )
    return timestamp, signatures


def verify_header(
    payload: str | bytes,
    sig_header: str,
    secret: str,
    tolerance: int | None = DEFAULT_TOLERANCE,
) -> bool:
    """Check a signature header against a payload.

    Raises:
        SignatureVerificationError: If no signature matches or the timestamp
            is outside the tolerance window.
    """
    timestamp, signatures = _parse_header(sig_header)
    expected = compute_signature(payload, secret, timestamp)
    if not any(hmac.compare_digest(expected, sig) for sig in signatures):
        raise SignatureVerificationError(
            "No signatures found matching the expected signature for payload", sig_header
        )
    if tolerance and timestamp < time.time() - tolerance:
        raise SignatureVerificationError(
            "Timestamp outside the tolerance zone", sig_header
        )
    return True


def construct_event(
    payload: str | bytes,
    sig_header: str,
    secret: str,
    tolerance: int | None = DEFAULT_TOLERANCE,
) -> StripeObject:
    """Verify a webhook request body and parse it into an event view."""
    verify_header(payload, sig_header, secret, tolerance)
    data: dict[str, Any] = json.loads(_as_bytes(payload))
    return StripeObject(data)
