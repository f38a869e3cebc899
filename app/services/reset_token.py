"""Password reset tokens.

The plaintext token only ever travels in the reset link. The database keeps
its SHA-256 digest, so lookups are a plain equality match on the digest.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

RESET_TOKEN_BYTES = 20
RESET_TOKEN_TTL = timedelta(minutes=15)


@dataclass(frozen=True)
class ResetToken:
    plaintext: str
    digest: str
    expires_at: datetime


def digest_reset_token(plaintext: str) -> str:
    """Deterministic one-way digest of a reset token."""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


def generate_reset_token(now: datetime | None = None) -> ResetToken:
    """Create a fresh reset token expiring RESET_TOKEN_TTL from ``now``."""
    plaintext = secrets.token_hex(RESET_TOKEN_BYTES)
    issued_at = now or datetime.utcnow()
    return ResetToken(
        plaintext=plaintext,
        digest=digest_reset_token(plaintext),
        expires_at=issued_at + RESET_TOKEN_TTL,
    )


def reset_token_matches(plaintext: str, stored_digest: str | None) -> bool:
    if not plaintext or not stored_digest:
        return False
    return hmac.compare_digest(digest_reset_token(plaintext), stored_digest)
