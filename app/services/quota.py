"""
Taste Palette API - Scan Quota Service.

Plan limits for menu scans and onboarding scan bonuses. Counters only
change through single conditional updates, so concurrent requests from
the same user cannot overdraw a quota.
"""

import logging
from typing import Dict, Optional

from beanie import UpdateResponse
from beanie.odm.operators.update.general import Inc, Set

from settings import settings
from app.models.mongodb import OnboardingStatus, Plan, UserDocument, utcnow
from app.utils.errors import QuotaExceededError, ValidationError

logger = logging.getLogger(__name__)


# Weekly upload limits for paid plans; None means unlimited
PLAN_WEEKLY_LIMITS: Dict[Plan, Optional[int]] = {
    Plan.BASIC: 1,
    Plan.STANDARD: 7,
    Plan.PREMIUM: None,
}


def onboarding_bonus(status: OnboardingStatus) -> int:
    """Free scans granted for leaving onboarding with ``status``."""
    if status == OnboardingStatus.COMPLETED:
        return settings.ONBOARDING_COMPLETE_BONUS
    if status == OnboardingStatus.SKIPPED:
        return settings.ONBOARDING_SKIP_BONUS
    raise ValidationError("Invalid status")


def _quota_message(plan: Plan) -> str:
    if plan == Plan.FREE:
        return "No free scans remaining. Please upgrade your plan."
    return "Weekly upload limit reached"


def check_quota(user: UserDocument) -> None:
    """
    Reject a scan the user's plan does not allow.

    This is a read-only pre-check, run before the upload is read so a
    blocked request costs nothing. ``reserve_scan`` is the authoritative
    check.

    Raises:
        QuotaExceededError: No scans left.
    """
    if user.plan == Plan.FREE:
        if user.free_scan_count <= 0:
            raise QuotaExceededError(_quota_message(user.plan))
        return

    limit = PLAN_WEEKLY_LIMITS[user.plan]
    if limit is not None and user.uploads_this_week >= limit:
        raise QuotaExceededError(_quota_message(user.plan))


async def reserve_scan(user: UserDocument) -> UserDocument:
    """
    Atomically consume one scan.

    FREE decrements ``free_scan_count`` only while it is positive. Paid
    plans increment ``uploads_this_week`` only while under the limit.

    Args:
        user: Current user.

    Returns:
        UserDocument: The user after the update.

    Raises:
        QuotaExceededError: The conditional update matched nothing.
    """
    if user.plan == Plan.FREE:
        query = UserDocument.find_one(
            UserDocument.id == user.id,
            UserDocument.plan == Plan.FREE,
            UserDocument.free_scan_count > 0
        )
        update = Inc({UserDocument.free_scan_count: -1})
    else:
        limit = PLAN_WEEKLY_LIMITS[user.plan]
        if limit is None:
            query = UserDocument.find_one(UserDocument.id == user.id)
        else:
            query = UserDocument.find_one(
                UserDocument.id == user.id,
                UserDocument.uploads_this_week < limit
            )
        update = Inc({UserDocument.uploads_this_week: 1})

    updated = await query.update(update, response_type=UpdateResponse.NEW_DOCUMENT)
    if updated is None:
        logger.info(f"Scan quota exhausted for user {user.id} ({user.plan.value})")
        raise QuotaExceededError(_quota_message(user.plan))
    return updated


async def release_scan(user: UserDocument) -> None:
    """Refund a scan reserved for an upload that failed."""
    if user.plan == Plan.FREE:
        update = Inc({UserDocument.free_scan_count: 1})
        query = UserDocument.find_one(UserDocument.id == user.id)
    else:
        update = Inc({UserDocument.uploads_this_week: -1})
        query = UserDocument.find_one(
            UserDocument.id == user.id,
            UserDocument.uploads_this_week > 0
        )
    await query.update(update)
    logger.info(f"Refunded scan for user {user.id}")


async def complete_onboarding(user: UserDocument, status: OnboardingStatus) -> UserDocument:
    """
    Leave onboarding and grant the matching scan bonus.

    The bonus is granted only on the transition out of NOT_STARTED.
    Repeated calls return the current state without granting again.

    Args:
        user: Current user.
        status: COMPLETED or SKIPPED.

    Raises:
        ValidationError: Any other status.
    """
    bonus = onboarding_bonus(status)

    updated = await UserDocument.find_one(
        UserDocument.id == user.id,
        UserDocument.onboarding_status == OnboardingStatus.NOT_STARTED
    ).update(
        Set({UserDocument.onboarding_status: status, UserDocument.updated_at: utcnow()}),
        Inc({UserDocument.free_scan_count: bonus}),
        response_type=UpdateResponse.NEW_DOCUMENT
    )

    if updated is None:
        logger.info(f"Onboarding already finished for user {user.id}; no bonus granted")
        return await UserDocument.get(user.id)

    logger.info(f"User {user.id} onboarding {status.value}: +{bonus} free scans")
    return updated
