"""Application error taxonomy.

Every failure the services raise is an ``AppError`` carrying a user-facing
message and the HTTP status the API layer should answer with.
"""


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class DuplicateEmailError(AppError):
    """An account with this email already exists."""

    status_code = 409

    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(message)


class InvalidCredentialsError(AppError):
    """Email/password mismatch. Deliberately does not say which part was wrong."""

    status_code = 401

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class InvalidTokenError(AppError):
    """Session token missing, tampered with, or expired."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404


class InvalidOrExpiredTokenError(AppError):
    """Reset token unknown, already used, or past its expiry."""

    status_code = 400

    def __init__(self, message: str = "Token is invalid or expired, please try again") -> None:
        super().__init__(message)


class UploadError(AppError):
    """The media collaborator rejected or failed an upload."""

    status_code = 500


class DeliveryError(AppError):
    """The notifier could not deliver an email."""

    status_code = 500
