"""Pydantic schemas for user account endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


# Missing fields are checked by AuthService so they fail with its messages.
class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    old_password: str | None = None
    new_password: str | None = None


class AvatarResponse(BaseModel):
    public_id: str | None
    secure_url: str | None


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password."""

    id: int
    full_name: str
    email: str
    role: str
    avatar: AvatarResponse
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            role=user.role.value,
            avatar=AvatarResponse(public_id=user.avatar_public_id, secure_url=user.avatar_secure_url),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserEnvelope(BaseModel):
    success: bool = True
    message: str
    user: UserResponse


class AuthResponse(UserEnvelope):
    token: str = Field(description="Session token, also set as the 'token' cookie")


class MessageResponse(BaseModel):
    success: bool = True
    message: str
