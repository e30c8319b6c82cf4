"""Account, credential and token operations for the auth service."""
import logging
from datetime import timedelta
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.app.config import settings
from src.app.exceptions import ConflictError, NotFoundError, UnauthorizedError
from src.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    needs_rehash,
    verify_password,
)
from src.core.single_flight import SingleFlight
from src.models.base import utcnow
from src.models.user import User
from src.repositories.user_repo import PasswordResetRepository, UserRepository
from src.schemas.auth import (
    LoginRequest,
    OAuthLoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
FORGOT_PASSWORD_MESSAGE = "If the email is registered, a reset link has been sent"

# Shared by every AuthService in the process
_refresh_flight = SingleFlight()


def issue_tokens(user: User) -> TokenResponse:
    claims = {"sub": str(user.id), "email": user.email}
    return TokenResponse(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
        user=UserResponse.model_validate(user),
    )


class AuthService:
    """Business logic behind /auth routes."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.resets = PasswordResetRepository(db)

    def register(self, request: RegisterRequest) -> TokenResponse:
        """
        Create a password account.

        Raises:
            ConflictError: email already registered
        """
        if self.users.get_by_email(request.email):
            raise ConflictError("Email already registered")

        try:
            user = self.users.create_user(
                name=request.name,
                email=request.email,
                password_hash=hash_password(request.password),
            )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise ConflictError("Email already registered")

        logger.info(f"User registered: {user.id}")
        return issue_tokens(user)

    def login(self, request: LoginRequest) -> TokenResponse:
        """
        Password login.

        Unknown email, OAuth-only account and wrong password all raise the
        same error.
        """
        user = self.users.get_by_email(request.email)
        if not user or not verify_password(request.password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if needs_rehash(user.password_hash):
            self.users.update(user, {"password_hash": hash_password(request.password)})

        return issue_tokens(user)

    def oauth_login(self, request: OAuthLoginRequest) -> TokenResponse:
        """Match by provider id, then link by email, else create the account."""
        user = self.users.get_by_google_id(request.google_id)
        if user is None:
            user = self.users.get_by_email(request.email)
            if user is not None:
                user = self.users.update(user, {
                    "google_id": request.google_id,
                    "avatar_url": request.avatar_url or user.avatar_url,
                })
                logger.info(f"Linked OAuth identity to user {user.id}")
            else:
                user = self.users.create_user(
                    name=request.name,
                    email=request.email,
                    google_id=request.google_id,
                    avatar_url=request.avatar_url,
                )
                logger.info(f"User created from OAuth: {user.id}")
        return issue_tokens(user)

    def forgot_password(self, email: str) -> Optional[Tuple[str, str]]:
        """
        Create a reset token for a known email.

        Returns:
            (email, token) to send, or None when the email is unknown
        """
        user = self.users.get_by_email(email)
        if user is None:
            return None
        reset = self.resets.create_for_user(
            user.id, timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        )
        logger.info(f"Password reset requested for user {user.id}")
        return user.email, reset.token

    def reset_password(self, request: ResetPasswordRequest) -> None:
        """
        Raises:
            NotFoundError: unknown token
            UnauthorizedError: token already used or expired
        """
        reset = self.resets.get_by_token(request.token)
        if reset is None:
            raise NotFoundError("Invalid token")
        if reset.is_used:
            raise UnauthorizedError("Token already used")
        if reset.is_expired(utcnow()):
            raise UnauthorizedError("Token expired")

        user = self.users.get(reset.user_id)
        if user is None:
            raise NotFoundError("Invalid token")

        user.password_hash = hash_password(request.password)
        self.resets.mark_used(reset)
        logger.info(f"Password reset completed for user {user.id}")

    def refresh(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new pair.

        Concurrent refreshes for the same user share a single execution.
        """
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        if payload is None:
            raise UnauthorizedError("Invalid token")

        subject = payload["sub"]
        tokens, shared = _refresh_flight.do(subject, lambda: self._reissue(subject))
        if shared:
            logger.debug(f"Refresh for {subject} served by an in-flight call")
        return tokens

    def _reissue(self, subject: str) -> TokenResponse:
        user = self.get_user(subject)
        if user is None:
            raise UnauthorizedError("User not found")
        return issue_tokens(user)

    def get_user(self, user_id) -> Optional[User]:
        try:
            return self.users.get(UUID(str(user_id)))
        except ValueError:
            return None

    def me(self, user_id) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id, request: UpdateProfileRequest) -> User:
        user = self.me(user_id)
        return self.users.update(user, request.model_dump(exclude_unset=True, exclude_none=True))
