"""
Taste Palette API - Gemini AI Service.

Gemini client for menu extraction, dish recommendations and taste
profile adjustments. Replies go through ``menu_decoder``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from settings import settings
from app.models.mongodb import MenuItem, Recommendation
from app.services.menu_decoder import (
    decode_menu_items,
    decode_profile_patch,
    decode_recommendations,
)
from app.utils.errors import ModelResponseError, ValidationError


logger = logging.getLogger(__name__)


MENU_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts menu items from images. "
    "Return only valid JSON arrays."
)

MENU_PROMPT = """Extract menu items from this image. Return a JSON array where each item has this format:
{
  "name": "Item name",
  "description": "Item description if available",
  "price": "Price if available",
  "category": "Category if available"
}

Only include items that are clearly menu items with names. Skip any headers, footers, or other text."""

RECOMMEND_SYSTEM_PROMPT = (
    "You are a helpful assistant that provides personalized menu recommendations based on "
    "taste preferences. Always return scores as whole numbers from 0-100 and format the "
    "response as a JSON object with a recommendations array."
)

PROFILE_SYSTEM_PROMPT = (
    "You are a culinary expert analyzing dishes to understand taste preferences."
)


def _recommendation_prompt(
    menu_items: List[Dict[str, Any]],
    taste_profile: Dict[str, Any],
    mood: Optional[str]
) -> str:
    mood_line = f"The user is in the mood for: {mood}" if mood else ""
    return f"""Given a user's taste profile and menu items, recommend dishes they would enjoy.
Return a JSON object with a 'recommendations' array. Each recommendation should have this format:
{{
  "dishName": "Name of the dish",
  "score": 85,
  "reason": "Why this dish matches their preferences: ingredients, cooking method, and fit with their taste profile and mood."
}}

User's taste profile:
{json.dumps(taste_profile, indent=2)}

Menu items:
{json.dumps(menu_items, indent=2)}

{mood_line}

Please provide:
1. Detailed explanations that help the user understand why each dish was recommended
2. Scores as whole numbers from 0-100 (no decimals)
3. At least 3 recommendations if possible
4. Consider dietary restrictions and allergies as hard constraints
5. Factor in their mood if specified"""


def _profile_prompt(dish: str, rating: int, taste_profile: Dict[str, Any]) -> str:
    return f"""Given this dish: "{dish}"
And this rating: {rating} (out of 5)
And the current taste profile: {json.dumps(taste_profile)}

Analyze how this rating should affect the taste profile. Consider:
1. The flavor components of the dish (spicy, sweet, salty, etc.)
2. Any dietary preferences that might be relevant
3. The strength of the rating (positive or negative)

Return only the fields that should be updated as a JSON object using the same keys
and allowed values as the current taste profile."""


class GeminiService:
    """
    Gemini API service for menu scanning and recommendations.

    Args:
        api_key: Gemini API key, defaults to settings.
        client: Pre-built ``genai.Client``; tests pass a fake here.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[genai.Client] = None):
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.client = client or genai.Client(api_key=self.api_key)
        self.vision_model = settings.GEMINI_VISION_MODEL
        self.text_model = settings.GEMINI_TEXT_MODEL

    async def _generate_text(
        self,
        model: str,
        contents: Any,
        system_instruction: str,
        json_mode: bool = False
    ) -> str:
        """
        Call the model and return the reply text.

        Raises:
            ModelResponseError: API or transport failure, or empty reply.
        """
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=settings.GEMINI_TEMPERATURE,
            response_mime_type="application/json" if json_mode else None,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini request to {model} failed: {e}")
            raise ModelResponseError(detail=str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini transport error for {model}: {e!r}")
            raise ModelResponseError(detail=f"Transport error: {e!r}") from e

        text = getattr(response, "text", None)
        if not text:
            raise ModelResponseError(detail=f"Empty response from {model}")
        return text

    async def scan_menu(self, image_bytes: bytes, mime_type: str) -> List[MenuItem]:
        """
        Extract menu items from a photographed menu.

        Args:
            image_bytes: Raw image content.
            mime_type: Upload content type, must be ``image/*``.

        Returns:
            List[MenuItem]: At least one item.

        Raises:
            ValidationError: Not an image, empty, or over the size limit.
            ModelResponseError: Model reply unusable.
        """
        if not mime_type or not mime_type.startswith("image/"):
            raise ValidationError("Invalid file type. Please upload an image.")
        if not image_bytes:
            raise ValidationError("No menu image provided")
        if len(image_bytes) > settings.MAX_MENU_IMAGE_BYTES:
            max_mb = settings.MAX_MENU_IMAGE_BYTES // (1024 * 1024)
            raise ValidationError(f"File too large. Maximum size is {max_mb}MB.")

        text = await self._generate_text(
            self.vision_model,
            [types.Part.from_bytes(data=image_bytes, mime_type=mime_type), MENU_PROMPT],
            MENU_SYSTEM_PROMPT
        )
        items = decode_menu_items(text)
        logger.info(f"Extracted {len(items)} menu items")
        return items

    async def recommend(
        self,
        menu_items: List[MenuItem],
        taste_profile: Dict[str, Any],
        mood: Optional[str] = None
    ) -> List[Recommendation]:
        """
        Score menu items against a taste profile.

        Args:
            menu_items: Items from ``scan_menu``.
            taste_profile: Profile in its camelCase wire form.
            mood: Optional free-text mood.

        Returns:
            List[Recommendation]: Normalized 0-100 scores.
        """
        prompt = _recommendation_prompt(
            [item.model_dump(exclude_none=True) for item in menu_items],
            taste_profile,
            mood
        )
        text = await self._generate_text(
            self.text_model,
            prompt,
            RECOMMEND_SYSTEM_PROMPT,
            json_mode=True
        )
        return decode_recommendations(text)

    async def adjust_profile(
        self,
        dish: str,
        rating: int,
        taste_profile: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Ask which profile fields should change after a dish rating."""
        text = await self._generate_text(
            self.text_model,
            _profile_prompt(dish, rating, taste_profile),
            PROFILE_SYSTEM_PROMPT,
            json_mode=True
        )
        return decode_profile_patch(text)
