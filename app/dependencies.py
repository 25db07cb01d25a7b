"""
Taste Palette API - FastAPI Dependencies.

Dependency injection helpers for routes.
"""

from typing import Optional

from fastapi import Depends

from app.middleware.auth import CurrentSession, jwt_bearer, optional_jwt_bearer
from app.models.mongodb import UserDocument
from app.services.email_service import EmailService, email_service
from app.services.gemini import GeminiService


async def get_current_session(
    current: CurrentSession = Depends(jwt_bearer)
) -> CurrentSession:
    """
    Get the authenticated session.

    Raises:
        AuthenticationError: 401 if not authenticated.
    """
    return current


async def get_current_user(
    current: CurrentSession = Depends(jwt_bearer)
) -> UserDocument:
    """
    Get current authenticated user from database.

    Args:
        current: Session resolved by jwt_bearer.

    Returns:
        UserDocument: Authenticated user object, freshly loaded.
    """
    return current.user


async def get_optional_user(
    current: Optional[CurrentSession] = Depends(optional_jwt_bearer)
) -> Optional[UserDocument]:
    """Current user, or None for anonymous requests."""
    return current.user if current else None


_gemini_service: Optional[GeminiService] = None


def get_gemini_service() -> GeminiService:
    """
    Shared Gemini client, created on first use.

    Routes depend on this so tests can swap in a fake client through
    ``app.dependency_overrides``.
    """
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service


def get_email_service() -> EmailService:
    return email_service
