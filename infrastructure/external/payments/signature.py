"""
Webhook signature helpers for OpenPix callbacks.

`x-openpix-signature` carries an HMAC-SHA256 of the raw body. The digest is
sent base64 encoded; hex digests are accepted as well.
"""
from __future__ import annotations

import base64
import hashlib
import hmac


SIGNATURE_HEADER = "x-openpix-signature"


def _digest(key: str, body: bytes) -> bytes:
    return hmac.new(key.encode("utf-8"), body, hashlib.sha256).digest()


def sign_body(key: str, body: bytes) -> str:
    """Return the base64 HMAC-SHA256 signature of body."""
    return base64.b64encode(_digest(key, body)).decode("ascii")


def verify_signature(key: str, body: bytes, received: str | None) -> bool:
    if not received:
        return False
    digest = _digest(key, body)
    candidate = received.strip()
    expected_b64 = base64.b64encode(digest).decode("ascii")
    if hmac.compare_digest(candidate, expected_b64):
        return True
    return hmac.compare_digest(candidate.lower(), digest.hex())
