"""Import all models for Alembic."""
from .base import TimestampMixin, utcnow
from .user import User
from .password_reset import PasswordReset
from .album import Album
from .photo import Photo

__all__ = [
    "TimestampMixin",
    "utcnow",
    "User",
    "PasswordReset",
    "Album",
    "Photo",
]
