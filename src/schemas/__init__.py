"""
Schemas package.

Request/response models for the auth, albums, photos and upload services.
"""

from .auth import (
    RegisterRequest,
    LoginRequest,
    OAuthLoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    RefreshTokenRequest,
    UpdateProfileRequest,
    UserResponse,
    TokenResponse,
    MessageResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "OAuthLoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "RefreshTokenRequest",
    "UpdateProfileRequest",
    "UserResponse",
    "TokenResponse",
    "MessageResponse",
]
