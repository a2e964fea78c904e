import hashlib
import hmac
import secrets

SIGNATURE_PREFIX = "sha256="


def generate_secret() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check an HMAC-SHA256 hex digest, bare or prefixed with ``sha256=``."""
    if not signature:
        return False
    provided = signature
    if provided.startswith(SIGNATURE_PREFIX):
        provided = provided[len(SIGNATURE_PREFIX) :]
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
