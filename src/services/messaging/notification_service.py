# services/messaging/notification_service.py
import asyncio
import logging
from functools import partial

import resend  # blocking SDK

from src.app.config import settings

logger = logging.getLogger(__name__)

if not settings.RESEND_API_KEY:
    logger.warning("RESEND_API_KEY not set; password reset emails will not be delivered.")

# configure SDK (global)
resend.api_key = settings.RESEND_API_KEY


def password_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


def _password_reset_html(reset_url: str) -> str:
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h1 style="color: #333;">Reset your password</h1>
          <p>You asked to reset the password of your account.</p>
          <p>Follow the link below to choose a new password:</p>
          <a href="{reset_url}"
             style="display: inline-block; background-color: #2563eb; color: white;
                    padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 16px 0;">
            Reset password
          </a>
          <p style="color: #666; font-size: 14px;">This link expires in 1 hour.</p>
          <p style="color: #666; font-size: 14px;">If you did not ask for this, ignore this email.</p>
        </div>
    """


class NotificationService:
    """Send notifications via Resend email."""

    @staticmethod
    async def _run_blocking(fn, *args, **kwargs):
        """Run a blocking function in the default threadpool so async event loop isn't blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    @staticmethod
    def _send_email_blocking(to: str, subject: str, html: str) -> dict:
        """Blocking call to the resend SDK. Returns SDK response dict or raises."""
        return resend.Emails.send({
            "from": settings.RESEND_FROM_EMAIL,
            "to": to,
            "subject": subject,
            "html": html,
        })

    @classmethod
    async def send_password_reset_email(cls, email: str, token: str, max_retries: int = 3) -> bool:
        """Email a reset link. Returns True on success, False on permanent failure."""
        if not settings.RESEND_API_KEY:
            logger.warning(f"[EMAIL] Skipping password reset email to {email}: no RESEND_API_KEY")
            return False

        subject = "Password reset"
        html = _password_reset_html(password_reset_link(token))

        attempt = 0
        backoff_seconds = 1
        while attempt < max_retries:
            attempt += 1
            try:
                resp = await cls._run_blocking(cls._send_email_blocking, email, subject, html)
                logger.info(f"[EMAIL] Sent password reset to {email} (attempt {attempt}) resp: {resp}")
                return True
            except Exception as exc:
                logger.exception(f"[EMAIL] Error sending password reset to {email} (attempt {attempt}): {exc}")
                if attempt < max_retries:
                    await asyncio.sleep(backoff_seconds)
                    backoff_seconds *= 2
        logger.error(f"[EMAIL] Failed to send password reset to {email} after {attempt} attempts.")
        return False
