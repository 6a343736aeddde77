"""Webhook signature verification.

LINE signs every webhook body with the channel secret:
``X-Line-Signature = base64(HMAC-SHA256(channel_secret, body))``.
"""

import base64
import hashlib
import hmac

import logfire
from fastapi import HTTPException, Request

from line_echo_bot.config import get_settings
from line_echo_bot.constants import LINE_SIGNATURE_HEADER


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Compute the signature LINE sends for ``body``."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def is_valid_signature(channel_secret: str, body: bytes, signature: str) -> bool:
    """Compare a received signature against the expected one in constant time."""
    expected = compute_signature(channel_secret, body)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


async def verify_line_signature(request: Request) -> None:
    """FastAPI dependency rejecting webhook requests with a bad signature.

    Skipped when no channel secret is configured.

    Raises:
        HTTPException: 401 if the signature header is missing or wrong
    """
    settings = get_settings()
    if not settings.line_channel_secret:
        logfire.warn("LINE channel secret not configured, skipping signature check")
        return

    signature = request.headers.get(LINE_SIGNATURE_HEADER)
    if not signature:
        logfire.warn("Webhook request without signature header")
        raise HTTPException(status_code=401, detail="Missing signature")

    body = await request.body()
    if not is_valid_signature(settings.line_channel_secret, body, signature):
        logfire.warn("Webhook signature mismatch", body_length=len(body))
        raise HTTPException(status_code=401, detail="Invalid signature")
