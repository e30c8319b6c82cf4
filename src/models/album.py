"""Album model."""
from sqlalchemy import Column, String, Boolean, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from src.db.base import Base
from .base import TimestampMixin


class Album(Base, TimestampMixin):
    """User-owned collection of photos, optionally shared by public token."""

    __tablename__ = 'albums'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Sharing: is_public and public_token are always set/cleared together
    is_public = Column(Boolean, default=False, nullable=False)
    public_token = Column(String(64), unique=True, nullable=True, index=True)

    # Cover image object key
    thumbnail_key = Column(String(500), nullable=True)

    owner = relationship('User', back_populates='albums')
    photos = relationship('Photo', back_populates='album', cascade='all, delete-orphan', passive_deletes=True)

    def __repr__(self) -> str:
        return f'<Album(id={self.id}, title={self.title})>'
