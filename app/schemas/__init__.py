"""Taste Palette API - Pydantic Schemas Package."""

from app.schemas.base import (
    APIModel,
    SuccessResponse,
)
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    TokenResponse,
    RefreshRequest,
)
from app.schemas.user import (
    UserProfile,
    UpdateProfileRequest,
    OnboardingState,
)
from app.schemas.taste_profile import (
    TasteProfile,
    UpdateFromRatingRequest,
)
from app.schemas.menu import (
    MenuUpload,
    RateMenuRequest,
)
from app.schemas.diary import (
    RestaurantVisit,
    CreateVisitRequest,
    VisitFromScanRequest,
)

__all__ = [
    # Base
    "APIModel",
    "SuccessResponse",
    # Auth
    "SignupRequest",
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    # User
    "UserProfile",
    "UpdateProfileRequest",
    "OnboardingState",
    # Taste profile
    "TasteProfile",
    "UpdateFromRatingRequest",
    # Menu
    "MenuUpload",
    "RateMenuRequest",
    # Diary
    "RestaurantVisit",
    "CreateVisitRequest",
    "VisitFromScanRequest",
]
