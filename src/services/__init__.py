"""
Services package initializer.

Re-exports important service classes so callers can import from
`src.services` instead of deep module paths.
"""

from .messaging import NotificationService

__all__ = [
    "NotificationService",
]
