"""
Taste Palette API - User Schemas.

Account settings, onboarding and deletion.
"""

from typing import Optional

from pydantic import EmailStr, Field

from app.models.mongodb import OnboardingStatus, Plan
from app.schemas.base import APIModel, SuccessResponse


class UserProfile(APIModel):
    """
    Schema for user profile data.

    Attributes:
        id: User id.
        email: Login email.
        name: Display name.
        plan: Subscription plan.
        free_scan_count: Free scans left (FREE plan).
        uploads_this_week: Scans used this week (paid plans).
        onboarding_status: Onboarding progress.
        email_verified: Whether the email was confirmed.
    """

    id: str
    email: EmailStr
    name: str
    plan: Plan
    free_scan_count: int
    uploads_this_week: int
    onboarding_status: OnboardingStatus
    email_verified: bool

    @classmethod
    def from_document(cls, user) -> "UserProfile":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            plan=user.plan,
            free_scan_count=user.free_scan_count,
            uploads_this_week=user.uploads_this_week,
            onboarding_status=user.onboarding_status,
            email_verified=user.email_verified
        )


class UserProfileResponse(SuccessResponse):
    user: UserProfile


class UpdateProfileRequest(APIModel):
    """Name change and optional password change."""

    name: str = Field(..., min_length=2, max_length=100)
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class OnboardingState(APIModel):
    onboarding_status: OnboardingStatus
    free_scan_count: int
    email_verified: Optional[bool] = None


class OnboardingStateResponse(SuccessResponse):
    data: OnboardingState


class UpdateOnboardingRequest(APIModel):
    status: str = Field(..., description="COMPLETED or SKIPPED")


class DeleteAccountRequest(APIModel):
    reason: Optional[str] = Field(None, max_length=2000, description="Why the user is leaving")
