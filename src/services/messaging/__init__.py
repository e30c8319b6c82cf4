"""
Messaging package initializer.

Provides the email notification service used by the auth service.
"""

from .notification_service import NotificationService, password_reset_link

__all__ = [
    "NotificationService",
    "password_reset_link",
]
