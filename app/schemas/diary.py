"""
Taste Palette API - Diary Schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.models.mongodb import RestaurantVisitDocument
from app.schemas.base import APIModel, SuccessResponse


class _VisitFields(APIModel):
    rating: Optional[int] = Field(None, ge=1, le=5, description="1-5 stars")
    notes: Optional[str] = Field(None, max_length=2000)
    mood: Optional[str] = Field(None, max_length=200)
    visit_date: Optional[datetime] = None


class CreateVisitRequest(_VisitFields):
    """
    Schema for a diary entry logged by hand.

    Attributes:
        restaurant_name: Where the user ate.
        ordered_dish: What they ordered.
        menu_upload_id: Optional scan this visit belongs to.
    """

    restaurant_name: str = Field(..., max_length=200)
    ordered_dish: str = Field(..., max_length=200)
    menu_upload_id: Optional[str] = None

    @field_validator("restaurant_name", "ordered_dish")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class VisitFromScanRequest(_VisitFields):
    """Diary entry created from a scanned menu ("continue from scan")."""

    menu_upload_id: str = Field(..., min_length=1)
    ordered_dish: str = Field(..., min_length=1, max_length=200)
    restaurant_name: Optional[str] = Field(None, max_length=200)


class RestaurantVisit(APIModel):
    id: str
    menu_upload_id: Optional[str] = None
    restaurant_name: str
    ordered_dish: str
    rating: Optional[int] = None
    notes: Optional[str] = None
    mood: Optional[str] = None
    visit_date: datetime

    @classmethod
    def from_document(cls, document: RestaurantVisitDocument) -> "RestaurantVisit":
        data = document.model_dump(exclude={"id", "user_id", "menu_upload_id"})
        return cls.model_validate({
            **data,
            "id": str(document.id),
            "menu_upload_id": str(document.menu_upload_id) if document.menu_upload_id else None
        })


class VisitResponse(SuccessResponse):
    data: RestaurantVisit


class VisitListResponse(SuccessResponse):
    visits: List[RestaurantVisit]
