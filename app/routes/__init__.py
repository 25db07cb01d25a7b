"""Taste Palette API - Routes Package."""

from app.routes import (
    auth,
    menu,
    profile,
    diary,
    user,
)

__all__ = [
    "auth",
    "menu",
    "profile",
    "diary",
    "user",
]
