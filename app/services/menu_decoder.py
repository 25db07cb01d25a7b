"""
Taste Palette API - Model Response Decoder.

Turns raw model text into validated menu items, recommendations and
profile patches. Nothing outside this module handles raw model output.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from app.models.mongodb import MenuItem, Recommendation
from app.utils.errors import ModelResponseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|\n?```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """
    Remove Markdown code fences around a model reply.

    Example:
        >>> strip_code_fences('```json\\n[1]\\n```')
        '[1]'
    """
    return _FENCE_RE.sub("", text or "").strip()


def _parse(payload: str, what: str) -> Any:
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ModelResponseError(detail=f"Unparseable {what}: {e}") from e


def decode_menu_items(text: str) -> List[MenuItem]:
    """
    Decode the vision model's menu extraction.

    Args:
        text: Raw reply, optionally wrapped in code fences.

    Returns:
        List[MenuItem]: At least one validated item.

    Raises:
        ModelResponseError: Empty reply, not a JSON array, unparseable,
            no items, or an item without a name.
    """
    payload = strip_code_fences(text)
    if not payload:
        raise ModelResponseError(detail="Empty menu extraction")

    if not (payload.startswith("[") and payload.endswith("]")):
        raise ModelResponseError(detail=f"Menu extraction is not a JSON array: {payload[:200]}")

    raw_items = _parse(payload, "menu extraction")
    if not isinstance(raw_items, list):
        raise ModelResponseError(detail="Menu extraction is not a JSON array")
    if not raw_items:
        raise ModelResponseError(
            "No menu items found in the image",
            detail="Menu extraction returned an empty array"
        )

    try:
        return [MenuItem.model_validate(item) for item in raw_items]
    except PydanticValidationError as e:
        raise ModelResponseError(detail=f"Invalid menu item: {e}") from e


def normalize_score(score: Any) -> int:
    """
    Normalize a recommendation score to an integer in [0, 100].

    Scores of 1 or below are fractions and get rescaled.

    Example:
        >>> normalize_score(0.87)
        87
        >>> normalize_score(92.4)
        92
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        raise ModelResponseError(detail=f"Non-numeric score: {score!r}")

    if score <= 1:
        score = score * 100
    return max(0, min(100, int(round(score))))


def decode_recommendations(text: str) -> List[Recommendation]:
    """
    Decode the recommendation model's reply.

    Expects ``{"recommendations": [{"dishName", "score", "reason"}]}``.
    ``reason`` falls back to ``explanation``. One bad entry fails the
    whole reply.

    Raises:
        ModelResponseError: Wrong shape, missing dish name or score.
    """
    parsed = _parse(strip_code_fences(text), "recommendations")
    if not isinstance(parsed, dict) or not isinstance(parsed.get("recommendations"), list):
        raise ModelResponseError(detail="Invalid recommendations format")

    recommendations = []
    for entry in parsed["recommendations"]:
        if not isinstance(entry, dict):
            raise ModelResponseError(detail=f"Invalid recommendation entry: {entry!r}")
        dish_name = entry.get("dishName")
        if not dish_name or "score" not in entry or entry["score"] is None:
            raise ModelResponseError(detail=f"Recommendation missing dishName or score: {entry!r}")

        recommendations.append(Recommendation(
            dish_name=str(dish_name),
            score=normalize_score(entry["score"]),
            reason=str(entry.get("reason") or entry.get("explanation") or "")
        ))

    if len(recommendations) < 3:
        logger.info(f"Model returned only {len(recommendations)} recommendations")
    return recommendations


def decode_profile_patch(text: str) -> Dict[str, Any]:
    """
    Decode a partial taste profile returned after a dish rating.

    Raises:
        ModelResponseError: Reply is not a JSON object.
    """
    parsed = _parse(strip_code_fences(text) or "{}", "profile update")
    if not isinstance(parsed, dict):
        raise ModelResponseError(detail="Profile update is not a JSON object")
    return parsed
