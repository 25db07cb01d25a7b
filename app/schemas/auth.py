"""
Taste Palette API - Authentication Schemas.

Pydantic schemas for authentication requests and responses.
"""

from typing import Optional

from pydantic import ConfigDict, EmailStr, Field

from app.models.mongodb import OnboardingStatus
from app.schemas.base import APIModel, SuccessResponse


class SignupRequest(APIModel):
    """
    Schema for user signup request.

    Attributes:
        email: User's email address.
        password: User's password (min 8 characters, letters and digits).
        name: User's display name.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "ann@example.com",
                "password": "pw123456",
                "name": "Ann"
            }
        }
    )

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")
    name: str = Field(..., min_length=1, max_length=100, description="User's display name")


class LoginRequest(APIModel):
    """
    Schema for user login request.

    Attributes:
        email: User's email address.
        password: User's password.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "ann@example.com",
                "password": "pw123456"
            }
        }
    )

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")


class EmailRequest(APIModel):
    """Body for endpoints that only take an email (resend verification, reset)."""

    email: EmailStr = Field(..., description="Account email address")


class ResetPasswordConfirmRequest(APIModel):
    token: str = Field(..., min_length=1, description="Reset token from the email link")
    password: str = Field(..., description="New password")


class RefreshRequest(APIModel):
    """
    Schema for token refresh request.

    Attributes:
        refresh_token: The refresh token to exchange.
    """

    refresh_token: str = Field(..., description="Refresh token")


class GoogleSignInRequest(APIModel):
    token: str = Field(..., description="Google ID token from the client")


class SessionUser(APIModel):
    """User claims exposed to the client."""

    id: str
    email: EmailStr
    name: str
    onboarding_status: OnboardingStatus


class TokenResponse(SuccessResponse):
    """
    Schema for authentication token response.

    Attributes:
        access_token: JWT access token bound to a stored session.
        refresh_token: JWT refresh token for the same session.
        token_type: Token type (always "bearer").
        user: Session user claims.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "accessToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refreshToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "tokenType": "bearer",
                "user": {
                    "id": "665f1c2e9b1e8a3d4c5b6a70",
                    "email": "ann@example.com",
                    "name": "Ann",
                    "onboardingStatus": "NOT_STARTED"
                }
            }
        }
    )

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user: SessionUser


class SessionCheckResponse(APIModel):
    valid: bool
    onboarding_status: Optional[OnboardingStatus] = None
