"""
Taste Palette API - MongoDB Models Package.

Export all Beanie ODM models for MongoDB operations.
"""

from app.models.mongodb import (
    UserDocument,
    TasteProfileDocument,
    MenuUploadDocument,
    RestaurantVisitDocument,
    RatingDocument,
    SessionDocument,
    AccountDocument,
    DOCUMENT_MODELS,
)

__all__ = [
    "UserDocument",
    "TasteProfileDocument",
    "MenuUploadDocument",
    "RestaurantVisitDocument",
    "RatingDocument",
    "SessionDocument",
    "AccountDocument",
    "DOCUMENT_MODELS",
]
