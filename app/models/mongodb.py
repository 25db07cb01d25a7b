# app/models/mongodb.py
"""
Taste Palette MongoDB Document Models.

Beanie ODM models. Nested structures (menu items, recommendations,
taste preferences) are embedded sub-documents.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import BaseModel, EmailStr, Field, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel


def utcnow() -> datetime:
    """Current UTC time, naive, as MongoDB stores and returns it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Plan(str, Enum):
    FREE = "FREE"
    BASIC = "BASIC"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"


class OnboardingStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    SKIPPED = "SKIPPED"
    COMPLETED = "COMPLETED"


class SpiceLevel(str, Enum):
    NONE = "none"
    MILD = "mild"
    MEDIUM = "medium"
    HOT = "hot"
    VERY_HOT = "very-hot"


class TasteLevel(str, Enum):
    DISLIKE = "dislike"
    NEUTRAL = "neutral"
    LIKE = "like"


class DietaryRestrictions(BaseModel):
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    dairy_free: bool = False
    nut_free: bool = False
    halal: bool = False
    kosher: bool = False
    other: str = ""


class TastePreferences(BaseModel):
    sweet: TasteLevel = TasteLevel.NEUTRAL
    sour: TasteLevel = TasteLevel.NEUTRAL
    bitter: TasteLevel = TasteLevel.NEUTRAL
    umami: TasteLevel = TasteLevel.NEUTRAL
    salty: TasteLevel = TasteLevel.NEUTRAL
    tangy: TasteLevel = TasteLevel.NEUTRAL


class TasteProfileData(BaseModel):
    """
    Structured taste preference document.

    Shared by the stored profile, the API payload and the prompts sent
    to the recommendation model.
    """

    favorite_dishes: List[str] = Field(default_factory=list)
    disliked_ingredients: List[str] = Field(default_factory=list)
    dietary_restrictions: DietaryRestrictions = Field(default_factory=DietaryRestrictions)
    spice_preference: SpiceLevel = SpiceLevel.MEDIUM
    taste_preferences: TastePreferences = Field(default_factory=TastePreferences)
    cuisine_preferences: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    additional_notes: str = ""

    @field_validator(
        "favorite_dishes",
        "disliked_ingredients",
        "cuisine_preferences",
        "allergies",
        mode="after"
    )
    @classmethod
    def _drop_blank_entries(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]


class MenuItem(BaseModel):
    """One dish read off a menu image."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_text(cls, value):
        # Models sometimes answer with a bare number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Recommendation(BaseModel):
    dish_name: str
    score: int = Field(..., ge=0, le=100)
    reason: str = ""


class UserDocument(Document):
    """User model for MongoDB."""

    email: Indexed(EmailStr, unique=True)
    password_hash: str = ""
    name: str

    # Email verification
    email_verified_at: Optional[datetime] = None
    verification_token: Optional[str] = None

    # Password reset
    reset_token: Optional[str] = None
    reset_token_expires_at: Optional[datetime] = None

    # Plan & quota
    plan: Plan = Plan.FREE
    free_scan_count: int = 0
    uploads_this_week: int = 0
    last_upload_reset: datetime = Field(default_factory=utcnow)

    onboarding_status: OnboardingStatus = OnboardingStatus.NOT_STARTED

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    @property
    def email_verified(self) -> bool:
        return self.email_verified_at is not None

    class Settings:
        name = "users"
        indexes = [
            IndexModel([("reset_token", ASCENDING)], sparse=True),
            IndexModel([("last_upload_reset", ASCENDING)]),
        ]


class TasteProfileDocument(Document, TasteProfileData):
    """Taste profile, at most one per user."""

    user_id: Indexed(PydanticObjectId, unique=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "taste_profiles"


class MenuUploadDocument(Document):
    """One menu scan: extracted items, recommendations and later ratings."""

    user_id: PydanticObjectId
    menu_items: List[MenuItem] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    restaurant_name: Optional[str] = None
    mood: Optional[str] = None
    ratings: Optional[Dict[str, int]] = None
    feedback: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "menu_uploads"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)]),
        ]


class RestaurantVisitDocument(Document):
    """Diary entry for one restaurant visit."""

    user_id: PydanticObjectId
    menu_upload_id: Optional[PydanticObjectId] = None
    restaurant_name: str
    ordered_dish: str
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None
    mood: Optional[str] = None
    visit_date: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "restaurant_visits"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("visit_date", DESCENDING)]),
        ]


class RatingDocument(Document):
    """Per-dish rating submitted after a scanned visit."""

    user_id: PydanticObjectId
    dish_name: str
    rating: int = Field(..., ge=1, le=5)
    menu_upload_id: Optional[PydanticObjectId] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "ratings"
        indexes = [
            "user_id",
        ]


class SessionDocument(Document):
    """Login session; its id travels in the access token as ``sid``."""

    user_id: PydanticObjectId
    expires_at: datetime
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "sessions"
        indexes = [
            "user_id",
        ]


class AccountDocument(Document):
    """External sign-in identity linked to a user."""

    user_id: PydanticObjectId
    provider: str
    provider_account_id: str
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "accounts"
        indexes = [
            "user_id",
            IndexModel(
                [("provider", ASCENDING), ("provider_account_id", ASCENDING)],
                unique=True
            ),
        ]


# Documents owned by a user, deleted together with it
USER_OWNED_MODELS = [
    TasteProfileDocument,
    MenuUploadDocument,
    RestaurantVisitDocument,
    RatingDocument,
    SessionDocument,
    AccountDocument,
]

DOCUMENT_MODELS = [UserDocument, *USER_OWNED_MODELS]
