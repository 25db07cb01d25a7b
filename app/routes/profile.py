# app/routes/profile.py
"""
Taste Palette API - Taste Profile Routes.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_gemini_service
from app.models.mongodb import UserDocument
from app.schemas.taste_profile import TasteProfile, TasteProfileResponse, UpdateFromRatingRequest
from app.services import taste_profile
from app.services.gemini import GeminiService

router = APIRouter()


@router.get("/taste", response_model=TasteProfileResponse)
async def get_taste_profile(user: UserDocument = Depends(get_current_user)):
    """Stored taste profile, or the default profile for new users."""
    document = await taste_profile.get_profile(user.id)
    return TasteProfileResponse(data=taste_profile.to_schema(document))


@router.post("/taste", response_model=TasteProfileResponse)
async def save_taste_profile(payload: TasteProfile, user: UserDocument = Depends(get_current_user)):
    """Replace the taste profile, creating it on first save."""
    document = await taste_profile.save_profile(user.id, payload)
    return TasteProfileResponse(data=taste_profile.to_schema(document))


@router.post("/update-from-rating", response_model=TasteProfileResponse)
async def update_from_rating(
    payload: UpdateFromRatingRequest,
    user: UserDocument = Depends(get_current_user),
    gemini: GeminiService = Depends(get_gemini_service)
):
    """
    Let the model adjust the profile after a dish rating.

    Raises:
        NotFoundError 404: No taste profile yet
        ModelResponseError 500: Unusable model reply; profile unchanged
    """
    document = await taste_profile.apply_rating(gemini, user.id, payload.dish, payload.rating)
    return TasteProfileResponse(data=taste_profile.to_schema(document))
