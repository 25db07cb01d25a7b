"""
Taste Palette API - Schema Base Classes.

Request and response bodies use camelCase keys; Python code uses
snake_case attribute names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class SuccessResponse(APIModel):
    success: bool = True
    message: Optional[str] = None
