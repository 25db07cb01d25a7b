# app/routes/user.py
"""
Taste Palette API - User Routes.

Onboarding, account settings and account deletion.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Body, Depends

from app.dependencies import get_current_user
from app.models.mongodb import OnboardingStatus, UserDocument, utcnow
from app.schemas.base import SuccessResponse
from app.schemas.user import (
    DeleteAccountRequest,
    OnboardingState,
    OnboardingStateResponse,
    UpdateOnboardingRequest,
    UpdateProfileRequest,
    UserProfile,
    UserProfileResponse,
)
from app.services.account import delete_account
from app.services.auth import hash_password, verify_password
from app.services.quota import complete_onboarding
from app.utils.errors import ValidationError
from app.utils.security import validate_password_strength

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/onboarding-status", response_model=OnboardingStateResponse)
async def get_onboarding_status(user: UserDocument = Depends(get_current_user)):
    return OnboardingStateResponse(data=OnboardingState(
        onboarding_status=user.onboarding_status,
        free_scan_count=user.free_scan_count,
        email_verified=user.email_verified
    ))


@router.post("/update-onboarding", response_model=OnboardingStateResponse)
async def update_onboarding(payload: UpdateOnboardingRequest, user: UserDocument = Depends(get_current_user)):
    """
    Finish onboarding as COMPLETED (+2 free scans) or SKIPPED (+1).

    Only the first transition grants scans; repeating the call returns
    the current state.

    Raises:
        ValidationError 400: Status other than COMPLETED or SKIPPED
    """
    if payload.status not in (OnboardingStatus.COMPLETED.value, OnboardingStatus.SKIPPED.value):
        raise ValidationError("Invalid status")

    updated = await complete_onboarding(user, OnboardingStatus(payload.status))
    return OnboardingStateResponse(data=OnboardingState(
        onboarding_status=updated.onboarding_status,
        free_scan_count=updated.free_scan_count,
        email_verified=updated.email_verified
    ))


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(user: UserDocument = Depends(get_current_user)):
    return UserProfileResponse(user=UserProfile.from_document(user))


@router.put("/profile", response_model=UserProfileResponse)
async def update_profile(payload: UpdateProfileRequest, user: UserDocument = Depends(get_current_user)):
    """
    Change the display name and, optionally, the password.

    Raises:
        ValidationError 400: Missing or wrong current password, weak new password
    """
    if payload.new_password:
        if not payload.current_password:
            raise ValidationError("Current password is required to set new password")
        if not verify_password(payload.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        is_valid, error = validate_password_strength(payload.new_password)
        if not is_valid:
            raise ValidationError(error)
        user.password_hash = hash_password(payload.new_password)

    user.name = payload.name.strip()
    user.updated_at = utcnow()
    await user.save()
    logger.info(f"Profile updated for user {user.id}")

    return UserProfileResponse(
        message="Profile updated successfully",
        user=UserProfile.from_document(user)
    )


@router.delete("/delete-account", response_model=SuccessResponse)
async def delete_user_account(
    payload: Optional[DeleteAccountRequest] = Body(None),
    user: UserDocument = Depends(get_current_user)
):
    """
    Delete the account and everything it owns.

    Raises:
        ValidationError 400: No reason given
        PersistenceError 500: Deletion rolled back
    """
    reason = payload.reason.strip() if payload and payload.reason else ""
    if not reason:
        raise ValidationError("Please provide a reason for deleting your account")

    await delete_account(user, reason)
    return SuccessResponse(message="Account deleted successfully")
