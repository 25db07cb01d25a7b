"""
Taste Palette OAuth Service.

Google ID token verification and account linking.
"""

import logging
from typing import Dict, Optional

from google.auth.transport import requests
from google.oauth2 import id_token

from settings import settings
from app.models.mongodb import AccountDocument, UserDocument, utcnow

logger = logging.getLogger(__name__)

GOOGLE_PROVIDER = "google"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class OAuthService:
    """Google OAuth 2.0 integration service."""

    def __init__(self):
        """Initialize with Google Client ID."""
        self.google_client_id = settings.GOOGLE_CLIENT_ID

    async def verify_google_token(self, token: str) -> Optional[Dict[str, str]]:
        """
        Verify Google ID token and extract user profile.

        Args:
            token: Google ID token from frontend

        Returns:
            Dictionary with user profile:
            {
                "email": "user@gmail.com",
                "name": "Ann Lee",
                "sub": "google_user_id",
                "email_verified": True
            }
            Returns None if verification fails.
        """
        if not self.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID not configured - Google sign-in disabled")
            return None
        try:
            idinfo = id_token.verify_oauth2_token(
                token,
                requests.Request(),
                self.google_client_id
            )
        except ValueError as e:
            logger.warning(f"Google OAuth verification error: {e}")
            return None

        if idinfo.get("iss") not in GOOGLE_ISSUERS:
            return None

        return {
            "email": idinfo.get("email"),
            "name": idinfo.get("name"),
            "sub": idinfo.get("sub"),
            "email_verified": idinfo.get("email_verified", False)
        }

    async def sign_in(self, profile: Dict[str, str]) -> UserDocument:
        """
        Find or create the user behind a verified Google profile.

        An existing linked account wins; otherwise the profile is linked to
        the user with the same email, or a new verified user is created.

        Args:
            profile: Output of ``verify_google_token``.

        Returns:
            UserDocument: Signed-in user.
        """
        account = await AccountDocument.find_one(
            AccountDocument.provider == GOOGLE_PROVIDER,
            AccountDocument.provider_account_id == profile["sub"]
        )
        if account:
            user = await UserDocument.get(account.user_id)
            if user:
                return user
            await account.delete()

        email = profile["email"].strip().lower()
        user = await UserDocument.find_one(UserDocument.email == email)
        if user is None:
            user = UserDocument(
                email=email,
                name=profile.get("name") or email.split("@")[0],
                email_verified_at=utcnow(),
                free_scan_count=settings.FREE_SCAN_SIGNUP_BONUS
            )
            await user.insert()
            logger.info(f"New user via Google sign-in: {user.email}")
        elif not user.email_verified and profile.get("email_verified"):
            user.email_verified_at = utcnow()
            user.verification_token = None
            await user.save()

        await AccountDocument(
            user_id=user.id,
            provider=GOOGLE_PROVIDER,
            provider_account_id=profile["sub"]
        ).insert()
        logger.info(f"Linked Google account to user {user.id}")
        return user


# Singleton instance
oauth_service = OAuthService()
