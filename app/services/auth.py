"""Authentication service.

Orchestrates registration, login, profile reads and updates, password change
and the forgot/reset password handshake on top of the user directory.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import (
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from app.models.user import User
from app.repositories.users import UserDirectory, normalize_email
from app.services.email import EmailService, get_email_service
from app.services.jwt import JWTService, get_jwt_service
from app.services.media import AVATAR_OPTIONS, MediaService, get_media_service
from app.services.password import verify_password
from app.services.reset_token import digest_reset_token, generate_reset_token, reset_token_matches

logger = logging.getLogger("lms")

FULL_NAME_MIN_LEN = 3
FULL_NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


@dataclass
class AuthResult:
    """A user together with a freshly issued session token."""

    user: User
    token: str


def _require(*values: str | None, message: str = "All fields are required") -> None:
    if any(v is None or not str(v).strip() for v in values):
        raise ValidationError(message)


def validate_full_name(full_name: str) -> str:
    name = full_name.strip().lower()
    if not FULL_NAME_MIN_LEN <= len(name) <= FULL_NAME_MAX_LEN:
        raise ValidationError(
            f"Name must be between {FULL_NAME_MIN_LEN} and {FULL_NAME_MAX_LEN} characters"
        )
    return name


def validate_email(email: str) -> str:
    normalized = normalize_email(email)
    if not EMAIL_RE.match(normalized):
        raise ValidationError("Please fill in a valid email address")
    return normalized


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    return password


class AuthService:
    """Handles the account and credential lifecycle."""

    def __init__(
        self,
        settings: Settings | None = None,
        jwt_service: JWTService | None = None,
        email_service: EmailService | None = None,
        media_service: MediaService | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.jwt_service = jwt_service or get_jwt_service()
        self.email_service = email_service or get_email_service()
        self.media_service = media_service or get_media_service()

    def _issue_token(self, user: User) -> str:
        return self.jwt_service.create_token(user_id=user.id, email=user.email, role=user.role.value)

    def register(
        self,
        db: Session,
        full_name: str,
        email: str,
        password: str,
        avatar_path: str | Path | None = None,
    ) -> AuthResult:
        """Create an account and log it in.

        If the avatar upload fails the account still exists with the
        placeholder avatar and the UploadError is raised to the caller.
        """
        _require(full_name, email, password)
        name = validate_full_name(full_name)
        normalized_email = validate_email(email)
        validate_password(password)

        directory = UserDirectory(db)
        user = directory.create(
            full_name=name,
            email=normalized_email,
            password=password,
            avatar_public_id=normalized_email,
            avatar_secure_url=self.settings.DEFAULT_AVATAR_URL,
        )

        if avatar_path:
            result = self.media_service.upload(avatar_path, **AVATAR_OPTIONS)
            user.avatar_public_id = result.public_id
            user.avatar_secure_url = result.secure_url
            directory.save(user)

        return AuthResult(user=user, token=self._issue_token(user))

    def authenticate(self, db: Session, email: str, password: str) -> AuthResult:
        """Check credentials and issue a session token.

        Unknown email and wrong password fail with the same error.
        """
        _require(email, password)
        user = UserDirectory(db).find_by_email(email, with_password=True)
        if not user or not verify_password(password, user.password):
            raise InvalidCredentialsError()

        return AuthResult(user=user, token=self._issue_token(user))

    def get_profile(self, db: Session, user_id: int) -> User:
        user = UserDirectory(db).find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        db: Session,
        user_id: int,
        full_name: str | None = None,
        avatar_path: str | Path | None = None,
    ) -> User:
        """Update the mutable profile fields. Email and role are never changed here."""
        directory = UserDirectory(db)
        user = directory.find_by_id(user_id)
        if not user:
            raise NotFoundError("User does not exist")

        if full_name is not None and full_name.strip():
            user.full_name = validate_full_name(full_name)

        if avatar_path:
            previous_public_id = user.avatar_public_id
            result = self.media_service.upload(avatar_path, **AVATAR_OPTIONS)
            user.avatar_public_id = result.public_id
            user.avatar_secure_url = result.secure_url
            if previous_public_id and previous_public_id != user.email:
                try:
                    self.media_service.destroy(previous_public_id)
                except UploadError as e:
                    logger.warning("Could not delete old avatar %s: %s", previous_public_id, e.message)

        return directory.save(user)

    def change_password(self, db: Session, user_id: int, old_password: str, new_password: str) -> None:
        """Replace the password after checking the current one.

        Session tokens issued before the change stay valid until they expire.
        """
        _require(old_password, new_password, message="All fields are mandatory")
        validate_password(new_password)

        directory = UserDirectory(db)
        user = directory.find_by_id(user_id, with_password=True)
        if not user:
            raise NotFoundError("User does not exist")
        if not verify_password(old_password, user.password):
            raise InvalidCredentialsError("Invalid old password")

        user.password = new_password
        directory.save(user)
        logger.info("Password changed for user id=%s", user.id)

    def request_password_reset(self, db: Session, email: str) -> None:
        """Issue a reset token and email the reset link.

        If sending the email fails for any reason the stored digest and expiry
        are cleared before the error propagates, so no usable token is
        left behind.
        """
        _require(email, message="Email is required")
        directory = UserDirectory(db)
        user = directory.find_by_email(email)
        if not user:
            raise NotFoundError("Email is not registered")

        reset_token = generate_reset_token()
        user.forgot_password_digest = reset_token.digest
        user.forgot_password_expiry = reset_token.expires_at
        directory.save(user)

        reset_url = f"{self.settings.FRONTEND_URL}/reset-password/{reset_token.plaintext}"
        try:
            self.email_service.send_password_reset(user.email, reset_url)
        except Exception:
            user.forgot_password_digest = None
            user.forgot_password_expiry = None
            directory.save(user)
            raise

        logger.info("Password reset requested for user id=%s", user.id)

    def reset_password(self, db: Session, reset_token: str, new_password: str) -> User:
        """Consume a reset token and set a new password.

        Unknown, used and expired tokens all fail with the same error.
        """
        _require(new_password, message="Password is required")
        validate_password(new_password)
        if not reset_token:
            raise InvalidOrExpiredTokenError()

        directory = UserDirectory(db)
        user = directory.find_by_reset_digest(digest_reset_token(reset_token), now=datetime.utcnow())
        if not user or not reset_token_matches(reset_token, user.forgot_password_digest):
            raise InvalidOrExpiredTokenError()

        user.password = new_password
        user.forgot_password_digest = None
        user.forgot_password_expiry = None
        directory.save(user)
        logger.info("Password reset completed for user id=%s", user.id)
        return user


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
