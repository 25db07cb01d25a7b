"""
Taste Palette API - Taste Profile Schemas.
"""

from typing import Any, Dict

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.mongodb import DietaryRestrictions, TastePreferences, TasteProfileData
from app.schemas.base import APIModel, SuccessResponse


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DietaryRestrictionsSchema(DietaryRestrictions):
    model_config = _CAMEL


class TasteProfile(TasteProfileData):
    """
    Taste profile as exchanged with clients and the recommendation model.

    Attributes mirror TasteProfileData; keys are camelCase on the wire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "favoriteDishes": ["pad thai", "margherita pizza"],
                "dislikedIngredients": ["cilantro"],
                "dietaryRestrictions": {"vegetarian": True, "glutenFree": False, "other": ""},
                "spicePreference": "hot",
                "tastePreferences": {"sweet": "neutral", "umami": "like"},
                "cuisinePreferences": ["thai", "italian"],
                "allergies": ["peanuts"],
                "additionalNotes": "Prefers small plates"
            }
        }
    )

    dietary_restrictions: DietaryRestrictionsSchema = Field(default_factory=DietaryRestrictionsSchema)
    taste_preferences: TastePreferences = Field(default_factory=TastePreferences)

    def to_wire(self) -> Dict[str, Any]:
        """camelCase JSON-ready dict, as sent to the model."""
        return self.model_dump(mode="json", by_alias=True)


class TasteProfileResponse(SuccessResponse):
    data: TasteProfile


class UpdateFromRatingRequest(APIModel):
    """
    Schema for a post-visit profile adjustment.

    Attributes:
        dish: Name of the dish that was rated.
        rating: 1-5 stars.
    """

    dish: str = Field(..., min_length=1, description="Rated dish")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
