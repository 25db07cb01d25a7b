"""Taste Palette API - Utilities Package."""

from app.utils.security import validate_password_strength
from app.utils.errors import (
    TastePaletteException,
    AuthenticationError,
    NotFoundError,
    ValidationError,
    QuotaExceededError,
    ModelResponseError,
)

__all__ = [
    "validate_password_strength",
    "TastePaletteException",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "QuotaExceededError",
    "ModelResponseError",
]
