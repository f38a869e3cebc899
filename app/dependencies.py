"""Authentication dependencies and session cookie helpers for FastAPI routes."""

from dataclasses import dataclass

from fastapi import Depends, Request, Response

from app.config import Settings, get_settings
from app.errors import ForbiddenError, InvalidTokenError
from app.models.user import Role
from app.services.jwt import JWTService, get_jwt_service

AUTH_COOKIE_NAME = "token"
COOKIE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days


@dataclass
class CurrentUser:
    """Authenticated user context, taken from verified token claims."""

    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def _extract_token(request: Request) -> str | None:
    # Check Authorization header first
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(AUTH_COOKIE_NAME)


def get_current_user(
    request: Request,
    jwt_service: JWTService = Depends(get_jwt_service),
) -> CurrentUser:
    """Extract and validate user from Bearer token or cookie. Raises 401 if invalid."""
    token = _extract_token(request)
    if not token:
        raise InvalidTokenError("Not authenticated")

    payload = jwt_service.decode_token(token)
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError() from e

    return CurrentUser(
        user_id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", Role.USER.value),
    )


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only ADMIN users through."""
    if not user.is_admin:
        raise ForbiddenError()
    return user


def set_auth_cookie(response: Response, token: str, settings: Settings | None = None) -> None:
    """Set the session cookie."""
    settings = settings or get_settings()
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=COOKIE_MAX_AGE,
    )


def clear_auth_cookie(response: Response, settings: Settings | None = None) -> None:
    """Expire the session cookie immediately."""
    settings = settings or get_settings()
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value="",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=0,
    )
