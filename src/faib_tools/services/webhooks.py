"""
SheepCRM webhook helpers.
"""

import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-sheepcrm-signature"

# Payload keys that may carry the form response URI, in priority order
FORM_RESPONSE_URI_KEYS = ("form_response_uri", "uri", "form_ref")


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """
    Verify the HMAC-SHA256 hex signature of a webhook body.

    Verification is skipped (with a warning) when no secret is configured.
    """
    if not secret:
        logger.warning("SHEEPCRM_WEBHOOK_SECRET not set - skipping signature verification")
        return True

    if not signature:
        return False

    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature.strip(), expected)


def resolve_form_response_uri(data: dict) -> Optional[str]:
    """Find the form response URI in a webhook payload's data block."""
    for key in FORM_RESPONSE_URI_KEYS:
        value = data.get(key)
        if isinstance(value, dict):
            value = value.get("ref")
        if value:
            return str(value)
    return None
