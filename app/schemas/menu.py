"""
Taste Palette API - Menu Schemas.

Menu uploads, recommendations and post-visit ratings.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from app.models.mongodb import MenuUploadDocument
from app.schemas.base import APIModel, SuccessResponse


class MenuItemSchema(APIModel):
    name: str
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None


class RecommendationSchema(APIModel):
    """
    One scored dish.

    Attributes:
        dish_name: Dish as named on the menu.
        score: Match percentage, integer 0-100.
        reason: Why the dish fits the user's taste profile.
    """

    dish_name: str
    score: int = Field(..., ge=0, le=100)
    reason: str = ""


class MenuUpload(APIModel):
    """Stored scan as returned to clients."""

    id: str
    menu_items: List[MenuItemSchema] = Field(default_factory=list)
    recommendations: List[RecommendationSchema] = Field(default_factory=list)
    restaurant_name: Optional[str] = None
    mood: Optional[str] = None
    ratings: Optional[Dict[str, int]] = None
    feedback: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_document(cls, document: MenuUploadDocument) -> "MenuUpload":
        return cls.model_validate({**document.model_dump(exclude={"id", "user_id"}), "id": str(document.id)})


class MenuUploadResponse(SuccessResponse):
    menu_upload: MenuUpload


class MenuUploadListResponse(SuccessResponse):
    uploads: List[MenuUpload]


class MenuDetailResponse(SuccessResponse):
    data: MenuUpload


class RateMenuRequest(APIModel):
    """
    Schema for post-visit ratings of a scanned menu.

    Attributes:
        menu_id: Id of the MenuUpload being rated.
        ratings: Dish name to 1-5 stars.
        feedback: Optional free-text feedback.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "menuId": "665f1c2e9b1e8a3d4c5b6a70",
                "ratings": {"Pad Thai": 5, "Green Curry": 3},
                "feedback": "Great spice level"
            }
        }
    )

    menu_id: str = Field(..., min_length=1)
    ratings: Dict[str, int] = Field(..., min_length=1)
    feedback: Optional[str] = None

    @field_validator("ratings")
    @classmethod
    def _ratings_in_range(cls, value: Dict[str, int]) -> Dict[str, int]:
        for dish, stars in value.items():
            if not 1 <= stars <= 5:
                raise ValueError(f"Rating for {dish!r} must be between 1 and 5")
        return value


class RateMenuResult(APIModel):
    id: str
    ratings: Dict[str, int]
    feedback: Optional[str] = None


class RateMenuResponse(SuccessResponse):
    data: RateMenuResult
