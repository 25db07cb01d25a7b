"""Taste Palette API - Services Package."""

from .auth import (
    hash_password,
    verify_password,
    create_access_token,
    verify_token,
)
from .gemini import GeminiService
from .email_service import email_service, EmailService
from .oauth_service import oauth_service, OAuthService

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "verify_token",
    "GeminiService",
    "email_service",
    "EmailService",
    "oauth_service",
    "OAuthService",
]
