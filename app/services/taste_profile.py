"""
Taste Palette API - Taste Profile Service.

Read, replace and model-driven adjustment of a user's taste profile.
"""

import logging
from typing import Any, Dict, Optional

from beanie import PydanticObjectId
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.models.mongodb import TasteProfileDocument, utcnow
from app.schemas.taste_profile import TasteProfile
from app.services.gemini import GeminiService
from app.utils.errors import ModelResponseError, NotFoundError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = list(TasteProfile.model_fields)


def to_schema(document: Optional[TasteProfileDocument]) -> TasteProfile:
    """Profile document as an API schema; the default profile when None."""
    if document is None:
        return TasteProfile()
    return TasteProfile.model_validate(document.model_dump(include=set(PROFILE_FIELDS)))


async def get_profile(user_id: PydanticObjectId) -> Optional[TasteProfileDocument]:
    return await TasteProfileDocument.find_one(TasteProfileDocument.user_id == user_id)


async def save_profile(user_id: PydanticObjectId, profile: TasteProfile) -> TasteProfileDocument:
    """
    Replace the user's profile wholesale, creating it on first save.

    Args:
        user_id: Owner.
        profile: Complete validated profile.

    Returns:
        TasteProfileDocument: The stored profile.
    """
    values = profile.model_dump()
    document = await get_profile(user_id)
    if document is None:
        document = TasteProfileDocument(user_id=user_id, **values)
        await document.insert()
        logger.info(f"Created taste profile for user {user_id}")
        return document

    for field, value in values.items():
        setattr(document, field, value)
    document.updated_at = utcnow()
    await document.save()
    return document


def merge_patch(current: TasteProfile, patch: Dict[str, Any]) -> TasteProfile:
    """
    Shallow-merge a camelCase patch onto a profile.

    Unknown keys are ignored. The merged profile is validated as a whole.

    Raises:
        ModelResponseError: The merged profile is invalid.
    """
    merged = current.model_dump()
    aliases = {to_camel(name): name for name in PROFILE_FIELDS}
    for key, value in patch.items():
        name = aliases.get(key) or (key if key in PROFILE_FIELDS else None)
        if name is None:
            logger.debug(f"Ignoring unknown profile key from model: {key}")
            continue
        merged[name] = value

    try:
        return TasteProfile.model_validate(merged)
    except PydanticValidationError as e:
        raise ModelResponseError(
            "Failed to update taste profile",
            detail=f"Invalid profile patch {patch!r}: {e}"
        ) from e


async def apply_rating(
    gemini: GeminiService,
    user_id: PydanticObjectId,
    dish: str,
    rating: int
) -> TasteProfileDocument:
    """
    Adjust the stored profile from a dish rating.

    The stored profile is only written after the model's patch parses
    and the merged profile validates.

    Raises:
        NotFoundError: The user has no taste profile.
        ModelResponseError: Model failure or unusable patch.
    """
    document = await get_profile(user_id)
    if document is None:
        raise NotFoundError("Taste profile not found")

    current = to_schema(document)
    patch = await gemini.adjust_profile(dish, rating, current.to_wire())
    updated = merge_patch(current, patch)

    logger.info(f"Adjusting taste profile for user {user_id} after rating {dish!r} {rating}/5")
    return await save_profile(user_id, updated)
