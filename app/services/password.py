"""Password hashing and verification."""

import bcrypt

# bcrypt cost factor; each increment doubles the work.
BCRYPT_ROUNDS = 10


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password for storage."""
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plaintext password against a stored hash."""
    if not plain_password or not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
