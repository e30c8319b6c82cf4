"""User and password-reset repositories."""
from datetime import timedelta
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import secrets

from src.repositories.base import BaseRepository
from src.models.base import utcnow
from src.models.user import User
from src.models.password_reset import PasswordReset


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.get_by_field('email', email.lower())

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        return self.get_by_field('google_id', google_id)

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: Optional[str] = None,
        google_id: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        return self.create({
            'name': name,
            'email': email.lower(),
            'password_hash': password_hash,
            'google_id': google_id,
            'avatar_url': avatar_url,
        })


class PasswordResetRepository(BaseRepository[PasswordReset]):
    """Repository for single-use password reset tokens."""

    def __init__(self, db: Session):
        super().__init__(PasswordReset, db)

    @staticmethod
    def generate_token() -> str:
        return secrets.token_hex(32)

    def create_for_user(self, user_id: UUID, ttl: timedelta) -> PasswordReset:
        now = utcnow()
        return self.create({
            'user_id': user_id,
            'token': self.generate_token(),
            'created_at': now,
            'expires_at': now + ttl,
        })

    def get_by_token(self, token: str) -> Optional[PasswordReset]:
        return self.get_by_field('token', token)

    def mark_used(self, reset: PasswordReset) -> PasswordReset:
        return self.update(reset, {'used_at': utcnow()})
