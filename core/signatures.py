"""Inbound webhook signature checks."""

from __future__ import annotations

import hashlib
import hmac


def verify_github_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Validate GitHub's ``X-Hub-Signature-256: sha256=<hex>`` header."""
    if not signature:
        return False
    mac = hmac.new(secret.encode(), body, hashlib.sha256)
    expected = "sha256=" + mac.hexdigest()
    return hmac.compare_digest(expected.encode(), signature.encode())
