"""
Taste Palette Email Service.

Verification, password reset and marketing emails through the Resend API.
"""

import asyncio
import logging
from html import escape
from typing import Any, Dict
from urllib.parse import quote

import resend
from settings import settings

logger = logging.getLogger(__name__)


def _wrap_html(title: str, body: str) -> str:
    """Shared email layout."""
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #FFF8F1;">
    <table width="100%" cellpadding="0" cellspacing="0" style="padding: 40px 20px;">
        <tr>
            <td align="center">
                <table width="600" cellpadding="0" cellspacing="0" style="max-width: 600px; background: #FFFFFF; border-radius: 16px; padding: 40px;">
                    <tr>
                        <td>
                            <h1 style="color: #E4572E; font-size: 28px; margin: 0 0 24px 0;">Taste Palette</h1>
                            {body}
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
    """


def _button(url: str, label: str) -> str:
    return (
        f'<a href="{url}" style="display: inline-block; background: #E4572E; color: #FFFFFF; '
        f'padding: 12px 24px; border-radius: 8px; text-decoration: none; font-weight: 600;">{label}</a>'
    )


class EmailService:
    """Email service for account and marketing messages."""

    def __init__(self):
        """Initialize Resend API with API key."""
        resend.api_key = settings.RESEND_API_KEY

    @staticmethod
    def verification_url(token: str) -> str:
        return f"{settings.APP_URL}/verify?token={quote(token)}"

    @staticmethod
    def reset_url(token: str) -> str:
        return f"{settings.APP_URL}/reset-password/confirm?token={quote(token)}"

    async def _send(self, params: Dict[str, Any], kind: str) -> bool:
        """
        Send one email, never raising.

        Args:
            params: Resend payload.
            kind: Label for logs.

        Returns:
            True if email sent successfully, False otherwise
        """
        if not settings.RESEND_API_KEY:
            logger.warning(f"RESEND_API_KEY not configured - skipping {kind} email to {params['to']}")
            return False
        try:
            await asyncio.to_thread(resend.Emails.send, params)
            logger.info(f"Sent {kind} email to {params['to']}")
            return True
        except Exception as e:
            logger.error(f"Failed to send {kind} email to {params['to']}: {e}")
            return False

    async def send_verification_email(self, to_email: str, name: str, token: str) -> bool:
        """
        Send the email verification link.

        Args:
            to_email: Recipient email address
            name: Recipient's name
            token: Verification token

        Returns:
            True if email sent successfully, False otherwise
        """
        body = f"""
            <h2 style="color: #1F2933; font-size: 22px;">Welcome, {escape(name)}!</h2>
            <p style="color: #52606D; font-size: 16px; line-height: 1.6;">
                Confirm your email address to start scanning menus. The link expires in
                {settings.VERIFICATION_TOKEN_EXPIRE_HOURS} hours.
            </p>
            <p>{_button(self.verification_url(token), "Verify email")}</p>
        """
        return await self._send({
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": "Verify your Taste Palette account",
            "html": _wrap_html("Verify your email", body)
        }, "verification")

    async def send_password_reset_email(self, to_email: str, name: str, token: str) -> bool:
        """Send the password reset link."""
        body = f"""
            <h2 style="color: #1F2933; font-size: 22px;">Hi {escape(name)},</h2>
            <p style="color: #52606D; font-size: 16px; line-height: 1.6;">
                We received a request to reset your password. The link below is valid for
                {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes. If you didn't ask for this,
                you can ignore this email.
            </p>
            <p>{_button(self.reset_url(token), "Reset password")}</p>
        """
        return await self._send({
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": "Reset your Taste Palette password",
            "html": _wrap_html("Reset your password", body)
        }, "password reset")

    async def send_marketing_email(self, to_email: str, name: str) -> bool:
        """Weekly nudge to scan a new menu."""
        body = f"""
            <h2 style="color: #1F2933; font-size: 22px;">Hungry for something new, {escape(name)}?</h2>
            <p style="color: #52606D; font-size: 16px; line-height: 1.6;">
                Snap a menu on your next night out and we'll point you to the dishes
                that match your palate.
            </p>
            <p>{_button(f"{settings.APP_URL}/dashboard", "Scan a menu")}</p>
        """
        return await self._send({
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": "Discover your next favourite dish",
            "html": _wrap_html("Taste Palette", body)
        }, "marketing")


# Singleton instance
email_service = EmailService()
