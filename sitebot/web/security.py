"""
Webhook request verification.
"""

import hashlib
import hmac
from typing import Optional


def compute_signature(payload: bytes, secret: str) -> str:
    """Signature header value Meta sends for ``payload``."""
    digest = hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """Check an ``X-Hub-Signature-256`` header against the raw request body."""
    if not signature or not secret:
        return False
    return hmac.compare_digest(compute_signature(payload, secret), signature)
