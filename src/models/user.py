"""User model."""
from sqlalchemy import Column, String, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from src.db.base import Base
from .base import TimestampMixin


class User(Base, TimestampMixin):
    """Account holder; either password-based, OAuth-linked, or both."""

    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint(
            'password_hash IS NOT NULL OR google_id IS NOT NULL',
            name='ck_users_credential_present',
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), nullable=True, index=True)
    avatar_url = Column(String(500), nullable=True)

    # Relationships
    albums = relationship('Album', back_populates='owner', cascade='all, delete-orphan', passive_deletes=True)
    password_resets = relationship('PasswordReset', back_populates='user', cascade='all, delete-orphan', passive_deletes=True)

    def __repr__(self) -> str:
        return f'<User(id={self.id}, email={self.email})>'
