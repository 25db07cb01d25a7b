# app/routes/diary.py
"""
Taste Palette API - Diary Routes.

Restaurant visit log, including visits logged straight from a scan.
"""

import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_gemini_service
from app.middleware.auth import parse_object_id
from app.models.mongodb import MenuUploadDocument, RestaurantVisitDocument, UserDocument, utcnow
from app.schemas.diary import (
    CreateVisitRequest,
    RestaurantVisit,
    VisitFromScanRequest,
    VisitListResponse,
    VisitResponse,
)
from app.services import taste_profile
from app.services.gemini import GeminiService
from app.utils.errors import NotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()

UNKNOWN_RESTAURANT = "Unknown Restaurant"


async def _owned_upload_or_404(upload_id: str, user: UserDocument) -> MenuUploadDocument:
    object_id = parse_object_id(upload_id)
    upload = await MenuUploadDocument.get(object_id) if object_id else None
    if not upload or upload.user_id != user.id:
        raise NotFoundError("Menu not found")
    return upload


@router.get("/visits", response_model=VisitListResponse)
async def list_visits(user: UserDocument = Depends(get_current_user)):
    """The user's diary, most recent visit first."""
    visits = await RestaurantVisitDocument.find(
        RestaurantVisitDocument.user_id == user.id
    ).sort(-RestaurantVisitDocument.visit_date).to_list()
    return VisitListResponse(visits=[RestaurantVisit.from_document(visit) for visit in visits])


@router.post("/visits", response_model=VisitResponse)
async def create_visit(payload: CreateVisitRequest, user: UserDocument = Depends(get_current_user)):
    """
    Log a visit by hand.

    Raises:
        ValidationError 400: Missing restaurant name or dish
        NotFoundError 404: Linked menu missing or not owned
    """
    menu_upload_id = None
    if payload.menu_upload_id:
        menu_upload_id = (await _owned_upload_or_404(payload.menu_upload_id, user)).id

    visit = RestaurantVisitDocument(
        user_id=user.id,
        menu_upload_id=menu_upload_id,
        restaurant_name=payload.restaurant_name,
        ordered_dish=payload.ordered_dish,
        rating=payload.rating,
        notes=payload.notes or None,
        mood=payload.mood or None,
        visit_date=payload.visit_date or utcnow()
    )
    await visit.insert()
    logger.info(f"User {user.id} logged visit to {visit.restaurant_name}")

    return VisitResponse(data=RestaurantVisit.from_document(visit))


@router.post("/visit", response_model=VisitResponse)
async def visit_from_scan(
    payload: VisitFromScanRequest,
    user: UserDocument = Depends(get_current_user),
    gemini: GeminiService = Depends(get_gemini_service)
):
    """
    Log the dish ordered after scanning a menu.

    With a rating and a stored taste profile, the profile is adjusted from
    the rating. A failed adjustment is logged and the visit still counts.

    Raises:
        NotFoundError 404: Menu missing or not owned
    """
    upload = await _owned_upload_or_404(payload.menu_upload_id, user)

    visit = RestaurantVisitDocument(
        user_id=user.id,
        menu_upload_id=upload.id,
        restaurant_name=payload.restaurant_name or upload.restaurant_name or UNKNOWN_RESTAURANT,
        ordered_dish=payload.ordered_dish,
        rating=payload.rating,
        notes=payload.notes or None,
        mood=payload.mood or upload.mood,
        visit_date=payload.visit_date or utcnow()
    )
    await visit.insert()

    if payload.rating and await taste_profile.get_profile(user.id):
        try:
            await taste_profile.apply_rating(gemini, user.id, payload.ordered_dish, payload.rating)
        except Exception as e:
            logger.exception(f"Failed to update taste profile for user {user.id}: {e}")

    return VisitResponse(data=RestaurantVisit.from_document(visit))
