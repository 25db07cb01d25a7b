# app/routes/menu.py
"""
Taste Palette API - Menu Routes.

Menu photo upload, scan history and post-visit ratings.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from app.dependencies import get_current_user, get_gemini_service
from app.middleware.auth import parse_object_id
from app.middleware.rate_limit import limiter, scan_limit
from app.models.mongodb import MenuUploadDocument, RatingDocument, UserDocument
from app.schemas.base import SuccessResponse
from app.schemas.menu import (
    MenuDetailResponse,
    MenuUpload,
    MenuUploadListResponse,
    MenuUploadResponse,
    RateMenuRequest,
    RateMenuResponse,
    RateMenuResult,
)
from app.services import quota
from app.services.gemini import GeminiService
from app.services.menu_scan import process_menu_upload
from app.utils.errors import NotFoundError
from settings import settings

logger = logging.getLogger(__name__)
router = APIRouter()


async def _owned_upload(menu_id: str, user: UserDocument) -> MenuUploadDocument:
    """Load a menu upload owned by ``user``; 404 otherwise."""
    upload_id = parse_object_id(menu_id)
    upload = await MenuUploadDocument.get(upload_id) if upload_id else None
    if not upload or upload.user_id != user.id:
        raise NotFoundError("Menu not found")
    return upload


@router.post("/upload", response_model=MenuUploadResponse)
@limiter.limit(scan_limit)
async def upload_menu(
    request: Request,
    image: Optional[UploadFile] = File(None, description="Menu photo (image/*, max 5 MB)"),
    mood: Optional[str] = Form(None),
    restaurant_name: Optional[str] = Form(None, alias="restaurantName"),
    user: UserDocument = Depends(get_current_user),
    gemini: GeminiService = Depends(get_gemini_service)
):
    """
    Scan a menu photo and recommend dishes.

    The quota is checked before the upload is read, so a blocked request
    never reaches the model.

    Raises:
        QuotaExceededError 403: No scans left on the user's plan
        ValidationError 400: Missing, non-image or oversized file
        ModelResponseError 500: Menu could not be read
    """
    quota.check_quota(user)

    content = b""
    content_type = None
    if image is not None:
        # One byte over the limit is enough to reject it
        content = await image.read(settings.MAX_MENU_IMAGE_BYTES + 1)
        content_type = image.content_type

    upload = await process_menu_upload(
        gemini,
        user,
        content,
        content_type,
        mood=mood.strip() if mood else None,
        restaurant_name=restaurant_name.strip() if restaurant_name else None
    )
    return MenuUploadResponse(menu_upload=MenuUpload.from_document(upload))


@router.get("/uploads", response_model=MenuUploadListResponse)
async def list_uploads(user: UserDocument = Depends(get_current_user)):
    """All of the user's scans, newest first."""
    uploads = await MenuUploadDocument.find(
        MenuUploadDocument.user_id == user.id
    ).sort(-MenuUploadDocument.created_at).to_list()
    return MenuUploadListResponse(uploads=[MenuUpload.from_document(upload) for upload in uploads])


@router.post("/rate", response_model=RateMenuResponse)
async def rate_menu(payload: RateMenuRequest, user: UserDocument = Depends(get_current_user)):
    """
    Store post-visit dish ratings for a scanned menu.

    Ratings are kept on the upload and recorded per dish.

    Raises:
        NotFoundError 404: Menu missing or owned by someone else
    """
    upload = await _owned_upload(payload.menu_id, user)

    upload.ratings = payload.ratings
    if payload.feedback:
        upload.feedback = payload.feedback
    await upload.save()

    # Re-rating replaces the earlier per-dish rows
    await RatingDocument.find(RatingDocument.menu_upload_id == upload.id).delete()
    await RatingDocument.insert_many([
        RatingDocument(
            user_id=user.id,
            dish_name=dish,
            rating=stars,
            menu_upload_id=upload.id
        )
        for dish, stars in payload.ratings.items()
    ])
    logger.info(f"User {user.id} rated {len(payload.ratings)} dishes on menu {upload.id}")

    return RateMenuResponse(data=RateMenuResult(
        id=str(upload.id),
        ratings=upload.ratings,
        feedback=upload.feedback
    ))


@router.get("/{menu_id}", response_model=MenuDetailResponse)
async def get_menu(menu_id: str, user: UserDocument = Depends(get_current_user)):
    upload = await _owned_upload(menu_id, user)
    return MenuDetailResponse(data=MenuUpload.from_document(upload))


@router.delete("/{menu_id}", response_model=SuccessResponse)
async def delete_menu(menu_id: str, user: UserDocument = Depends(get_current_user)):
    """
    Delete one scan.

    Raises:
        NotFoundError 404: Menu missing or owned by someone else
    """
    upload = await _owned_upload(menu_id, user)
    await upload.delete()
    logger.info(f"User {user.id} deleted menu {menu_id}")
    return SuccessResponse(message="Menu deleted")
