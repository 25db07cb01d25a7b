"""
Taste Palette API - Menu Scan Pipeline.

Quota reservation, menu extraction, recommendations and persistence
for one uploaded menu photo.
"""

import logging
from typing import Optional

from app.models.mongodb import MenuUploadDocument, UserDocument
from app.services import quota
from app.services.gemini import GeminiService
from app.services.taste_profile import get_profile, to_schema
from app.utils.errors import ValidationError
from settings import settings

logger = logging.getLogger(__name__)


def validate_menu_image(content: bytes, content_type: Optional[str]) -> None:
    """
    Validate an uploaded menu image before any model call.

    Raises:
        ValidationError: Missing, not an image, or too large.
    """
    if not content:
        raise ValidationError("No menu file provided")
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError("Invalid file type. Please upload an image.")
    if len(content) > settings.MAX_MENU_IMAGE_BYTES:
        max_mb = settings.MAX_MENU_IMAGE_BYTES // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {max_mb}MB.")


async def process_menu_upload(
    gemini: GeminiService,
    user: UserDocument,
    image_bytes: bytes,
    mime_type: str,
    mood: Optional[str] = None,
    restaurant_name: Optional[str] = None
) -> MenuUploadDocument:
    """
    Run the full scan pipeline for one upload.

    Steps: quota pre-check, file validation, atomic quota reservation,
    menu extraction, recommendations (only with a stored taste profile),
    then one MenuUpload record. A failure after the reservation refunds
    the scan before the error propagates.

    Args:
        gemini: Model client.
        user: Current user.
        image_bytes: Uploaded file content.
        mime_type: Uploaded content type.
        mood: Optional mood for recommendations.
        restaurant_name: Optional restaurant label.

    Returns:
        MenuUploadDocument: The stored scan.

    Raises:
        QuotaExceededError: No scans left.
        ValidationError: Bad upload.
        ModelResponseError: Unusable model reply.
    """
    quota.check_quota(user)
    validate_menu_image(image_bytes, mime_type)

    await quota.reserve_scan(user)
    try:
        menu_items = await gemini.scan_menu(image_bytes, mime_type)

        recommendations = []
        profile = await get_profile(user.id)
        if profile is not None:
            recommendations = await gemini.recommend(
                menu_items,
                to_schema(profile).to_wire(),
                mood
            )

        upload = MenuUploadDocument(
            user_id=user.id,
            menu_items=menu_items,
            recommendations=recommendations,
            restaurant_name=restaurant_name or None,
            mood=mood or None
        )
        await upload.insert()
    except Exception:
        await quota.release_scan(user)
        raise

    logger.info(
        f"Menu upload {upload.id} for user {user.id}: "
        f"{len(menu_items)} items, {len(recommendations)} recommendations"
    )
    return upload
