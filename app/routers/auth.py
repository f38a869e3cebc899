"""User account API endpoints."""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, clear_auth_cookie, get_current_user, set_auth_cookie
from app.rate_limit import limiter
from app.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserEnvelope,
    UserResponse,
)
from app.services.auth import AuthService, get_auth_service
from app.services.media import MediaService, get_media_service

logger = logging.getLogger("lms")

router = APIRouter(prefix="/api/v1/user", tags=["User"])


def _stage_avatar(media_service: MediaService, avatar: UploadFile | None):
    if avatar is None or not avatar.filename:
        return None
    return media_service.store_file(avatar)


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    full_name: str | None = Form(None),
    email: str | None = Form(None),
    password: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    media_service: MediaService = Depends(get_media_service),
) -> AuthResponse:
    """Register a new user account, optionally with an avatar image."""
    avatar_path = _stage_avatar(media_service, avatar)
    try:
        result = auth_service.register(db, full_name, email, password, avatar_path=avatar_path)
    finally:
        if avatar_path:
            media_service.remove_local_file(avatar_path)

    set_auth_cookie(response, result.token, auth_service.settings)
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.from_user(result.user),
        token=result.token,
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Authenticate and receive a session cookie."""
    result = auth_service.authenticate(db, body.email, body.password)
    set_auth_cookie(response, result.token, auth_service.settings)
    return AuthResponse(
        message="User logged in successfully",
        user=UserResponse.from_user(result.user),
        token=result.token,
    )


@router.api_route("/logout", methods=["GET", "POST"], response_model=MessageResponse)
def logout(response: Response, auth_service: AuthService = Depends(get_auth_service)) -> MessageResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    clear_auth_cookie(response, auth_service.settings)
    return MessageResponse(message="User logged out successfully")


@router.get("/me", response_model=UserEnvelope)
def get_profile(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserEnvelope:
    """Return the authenticated user's profile."""
    profile = auth_service.get_profile(db, user.user_id)
    return UserEnvelope(message="User details", user=UserResponse.from_user(profile))


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Email a password reset link to a registered address."""
    auth_service.request_password_reset(db, body.email)
    return MessageResponse(message=f"Reset password token has been sent to {body.email.strip().lower()} successfully")


@router.post("/reset-password/{reset_token}", response_model=MessageResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    reset_token: str,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Set a new password using the token from the reset link."""
    auth_service.reset_password(db, reset_token, body.password)
    return MessageResponse(message="Password changed successfully")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Change the authenticated user's password."""
    auth_service.change_password(db, user.user_id, body.old_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


@router.put("/update", response_model=UserEnvelope)
def update_profile(
    full_name: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    media_service: MediaService = Depends(get_media_service),
) -> UserEnvelope:
    """Update the authenticated user's name and/or avatar."""
    avatar_path = _stage_avatar(media_service, avatar)
    try:
        profile = auth_service.update_profile(db, user.user_id, full_name=full_name, avatar_path=avatar_path)
    finally:
        if avatar_path:
            media_service.remove_local_file(avatar_path)
    return UserEnvelope(message="User updated successfully", user=UserResponse.from_user(profile))
