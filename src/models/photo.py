"""Photo model."""
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from src.db.base import Base
from .base import utcnow


class Photo(Base):
    """Photo metadata row; the bytes live in object storage under file_key."""

    __tablename__ = 'photos'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    album_id = Column(Uuid, ForeignKey('albums.id', ondelete='CASCADE'), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Storage info
    file_key = Column(String(500), nullable=False)
    thumbnail_key = Column(String(500), nullable=True)

    # File metadata
    size_bytes = Column(BigInteger, nullable=False)
    mime_type = Column(String(100), nullable=False)
    dominant_color = Column(String(7), nullable=False, default='#808080')
    acquired_at = Column(DateTime, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    album = relationship('Album', back_populates='photos')

    def __repr__(self) -> str:
        return f'<Photo(id={self.id}, title={self.title})>'
