import hmac
import hashlib
from typing import Optional


SIGNATURE_PREFIX = "sha256="


def verify_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """
    Check an `X-Hub-Signature-256` header against the configured secret.

    Only `sha256=<hex>` signatures are accepted; anything else is rejected
    rather than raised.
    """
    if not signature or not secret:
        return False

    signature = signature.strip()
    if not signature.startswith(SIGNATURE_PREFIX):
        return False

    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(SIGNATURE_PREFIX + digest, signature)
