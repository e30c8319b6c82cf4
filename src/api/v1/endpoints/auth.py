"""Authentication endpoints."""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from src.api.deps import Principal, get_current_principal, get_db, require_internal
from src.core.rate_limiter import RateLimit
from src.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    OAuthLoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
)
from src.services import NotificationService
from src.services.auth.auth_service import FORGOT_PASSWORD_MESSAGE, AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("register"))],
)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account with email and password.

    - Returns 409 if the email is already registered
    - Returns the token pair and the new user
    """
    return AuthService(db).register(request)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(RateLimit("login"))])
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Email/password login. Any credential mismatch is a 401 with the same message."""
    return AuthService(db).login(request)


@router.post("/oauth", response_model=TokenResponse, dependencies=[Depends(require_internal)])
def oauth_login(request: OAuthLoginRequest, db: Session = Depends(get_db)):
    """
    Sign in with an identity already verified by the OAuth callback.

    Internal only: the caller must present the service token.
    """
    return AuthService(db).oauth_login(request)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(RateLimit("forgot_password"))],
)
def forgot_password(
    request: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Always answers the same way, whether or not the email is registered."""
    pending = AuthService(db).forgot_password(request.email)
    if pending is not None:
        email, token = pending
        background_tasks.add_task(NotificationService.send_password_reset_email, email, token)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    dependencies=[Depends(RateLimit("reset_password"))],
)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    AuthService(db).reset_password(request)
    return MessageResponse(message="Password updated successfully")


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new token pair."""
    return AuthService(db).refresh(request.refresh_token)


@router.get("/me", response_model=UserResponse)
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return AuthService(db).me(principal.user_id)


@router.patch("/profile", response_model=UserResponse)
def update_profile(
    request: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Update display name and/or avatar."""
    return AuthService(db).update_profile(principal.user_id, request)
