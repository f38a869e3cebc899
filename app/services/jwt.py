"""JWT Token Service."""

from datetime import datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import Settings, get_settings
from app.errors import InvalidTokenError


class JWTService:
    """Issues and verifies signed, time-limited session tokens.

    There is no revocation list: a token stays valid until its ``exp``.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.JWT_EXPIRE_MINUTES

    def create_token(self, user_id: int, email: str, role: str, ttl_minutes: int | None = None) -> str:
        """Create a JWT token for the given user."""
        now = datetime.utcnow()
        expire = now + timedelta(minutes=ttl_minutes if ttl_minutes is not None else self.expire_minutes)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT token. Raises InvalidTokenError if invalid or expired."""
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError() from e
        if "sub" not in claims:
            raise InvalidTokenError()
        return claims


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
