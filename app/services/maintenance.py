"""
Taste Palette API - Scheduled Maintenance Jobs.

Weekly upload counter reset and the marketing email campaign, plus a
small asyncio scheduler that runs them on a fixed weekly calendar.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional

from beanie.odm.operators.find.comparison import In
from beanie.odm.operators.update.general import Set

from settings import settings
from app.models.mongodb import UserDocument, utcnow
from app.services.email_service import EmailService, email_service

logger = logging.getLogger(__name__)

UPLOAD_RESET_INTERVAL = timedelta(days=7)


async def reset_weekly_uploads(
    now: Optional[datetime] = None,
    batch_size: Optional[int] = None
) -> int:
    """
    Reset weekly upload counters that are due.

    Users whose last reset is older than a week and who uploaded
    something since are reset in batches.

    Args:
        now: Reference time, defaults to the current time.
        batch_size: Users per update, defaults to settings.

    Returns:
        int: Number of users reset.
    """
    now = now or utcnow()
    batch_size = batch_size or settings.UPLOAD_RESET_BATCH_SIZE
    cutoff = now - UPLOAD_RESET_INTERVAL

    users = await UserDocument.find(
        UserDocument.last_upload_reset < cutoff,
        UserDocument.uploads_this_week > 0
    ).to_list()
    logger.info(f"Found {len(users)} users to reset")

    for start in range(0, len(users), batch_size):
        batch = users[start:start + batch_size]
        await UserDocument.find(In(UserDocument.id, [user.id for user in batch])).update(
            Set({UserDocument.uploads_this_week: 0, UserDocument.last_upload_reset: now})
        )
        logger.info(f"Reset {len(batch)} users (batch {start // batch_size + 1})")

    logger.info("Weekly upload count reset completed")
    return len(users)


async def send_marketing_emails(
    mailer: Optional[EmailService] = None,
    batch_size: Optional[int] = None,
    delay_seconds: Optional[float] = None
) -> int:
    """
    Send the marketing email to every verified user.

    Each batch is sent concurrently, with a pause between batches. A
    failed send is logged and does not stop the campaign.

    Returns:
        int: Number of emails sent successfully.
    """
    mailer = mailer or email_service
    batch_size = batch_size or settings.MARKETING_BATCH_SIZE
    if delay_seconds is None:
        delay_seconds = settings.MARKETING_BATCH_DELAY_SECONDS

    users = await UserDocument.find(UserDocument.email_verified_at != None).to_list()  # noqa: E711
    logger.info(f"Found {len(users)} users with verified emails")

    sent = 0
    for start in range(0, len(users), batch_size):
        batch = users[start:start + batch_size]
        results = await asyncio.gather(
            *(mailer.send_marketing_email(user.email, user.name) for user in batch),
            return_exceptions=True
        )
        for user, result in zip(batch, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to send marketing email to {user.email}: {result}")
            elif result:
                sent += 1

        if start + batch_size < len(users):
            await asyncio.sleep(delay_seconds)

    logger.info(f"Marketing email campaign completed: {sent}/{len(users)} sent")
    return sent


async def run_maintenance() -> None:
    """Run every maintenance job once."""
    logger.info("=== Resetting Weekly Upload Counts ===")
    await reset_weekly_uploads()
    logger.info("=== Sending Marketing Emails ===")
    await send_marketing_emails()


@dataclass
class WeeklyJob:
    """A job that runs once a week at a fixed UTC weekday and hour."""

    name: str
    weekday: int  # Monday == 0
    hour: int
    run: Callable[[], Awaitable[object]]

    def next_run(self, now: datetime) -> datetime:
        return next_weekly_run(now, self.weekday, self.hour)


def next_weekly_run(now: datetime, weekday: int, hour: int) -> datetime:
    """
    Next occurrence of ``weekday`` at ``hour``:00 strictly after ``now``.

    Example:
        >>> next_weekly_run(datetime(2024, 1, 1, 0, 0), 0, 0)
        datetime.datetime(2024, 1, 8, 0, 0)
    """
    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    candidate += timedelta(days=(weekday - now.weekday()) % 7)
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


DEFAULT_JOBS: List[WeeklyJob] = [
    WeeklyJob("weekly upload reset", weekday=0, hour=0, run=reset_weekly_uploads),
    WeeklyJob("marketing emails", weekday=2, hour=10, run=send_marketing_emails),
]


async def run_scheduler(
    jobs: Optional[List[WeeklyJob]] = None,
    clock: Callable[[], datetime] = utcnow,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    max_runs: Optional[int] = None
) -> None:
    """
    Run jobs forever on their weekly schedule.

    A failing job is logged and rescheduled for the following week.

    Args:
        jobs: Jobs to run, defaults to DEFAULT_JOBS.
        clock: Current time source.
        sleep: Async sleep used between jobs.
        max_runs: Stop after this many job runs (used by tests).
    """
    jobs = jobs or DEFAULT_JOBS
    for job in jobs:
        logger.info(f"Scheduled {job.name}: weekday {job.weekday} at {job.hour:02d}:00 UTC")

    start = clock()
    due = [job.next_run(start) for job in jobs]

    runs = 0
    while max_runs is None or runs < max_runs:
        index = min(range(len(jobs)), key=due.__getitem__)
        job, due_at = jobs[index], due[index]
        wait = (due_at - clock()).total_seconds()
        logger.info(f"Next job: {job.name} at {due_at.isoformat()}")
        await sleep(max(wait, 0))

        logger.info(f"Running {job.name}...")
        try:
            await job.run()
            logger.info(f"{job.name} completed")
        except Exception as e:
            logger.exception(f"Error during {job.name}: {e}")
        due[index] = job.next_run(due_at)
        runs += 1
