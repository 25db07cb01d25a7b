from datetime import datetime, timedelta

import pytest

from app.models.mongodb import UserDocument
from app.services.maintenance import (
    WeeklyJob,
    next_weekly_run,
    reset_weekly_uploads,
    run_scheduler,
    send_marketing_emails,
)

NOW = datetime(2024, 5, 13, 0, 0)  # Monday


async def test_reset_weekly_uploads_only_touches_due_users(make_user):
    stale = NOW - timedelta(days=8)
    due = [
        await make_user(email=f"due{i}@example.com", uploads_this_week=i + 1, last_upload_reset=stale)
        for i in range(3)
    ]
    recent = await make_user(email="recent@example.com", uploads_this_week=2, last_upload_reset=NOW - timedelta(days=2))
    idle = await make_user(email="idle@example.com", uploads_this_week=0, last_upload_reset=stale)

    count = await reset_weekly_uploads(now=NOW, batch_size=2)

    assert count == 3
    for user in due:
        stored = await UserDocument.get(user.id)
        assert stored.uploads_this_week == 0
        assert stored.last_upload_reset == NOW
    assert (await UserDocument.get(recent.id)).uploads_this_week == 2
    assert (await UserDocument.get(idle.id)).last_upload_reset == stale


async def test_marketing_emails_skip_unverified_and_survive_failures(make_user, mailer):
    for name in ("ann", "bob", "cy"):
        await make_user(email=f"{name}@example.com", name=name.title())
    await make_user(email="new@example.com", verified=False)
    mailer.fail_for.add("bob@example.com")

    sent = await send_marketing_emails(mailer=mailer, batch_size=2, delay_seconds=0)

    assert sent == 2
    assert sorted(mailer.marketing) == ["ann@example.com", "cy@example.com"]


@pytest.mark.parametrize("now, weekday, hour, expected", [
    (datetime(2024, 5, 13, 0, 0), 0, 0, datetime(2024, 5, 20, 0, 0)),
    (datetime(2024, 5, 12, 23, 59), 0, 0, datetime(2024, 5, 13, 0, 0)),
    (datetime(2024, 5, 13, 9, 30), 2, 10, datetime(2024, 5, 15, 10, 0)),
    (datetime(2024, 5, 15, 10, 0, 1), 2, 10, datetime(2024, 5, 22, 10, 0)),
])
def test_next_weekly_run(now, weekday, hour, expected):
    assert next_weekly_run(now, weekday, hour) == expected


async def test_scheduler_runs_jobs_in_calendar_order():
    clock = [datetime(2024, 5, 13, 9, 0)]
    ran = []

    async def fake_sleep(seconds):
        clock[0] += timedelta(seconds=seconds)

    def recorder(name):
        async def run():
            ran.append((name, clock[0]))
        return run

    jobs = [
        WeeklyJob("reset", weekday=0, hour=0, run=recorder("reset")),
        WeeklyJob("marketing", weekday=2, hour=10, run=recorder("marketing")),
    ]

    await run_scheduler(jobs, clock=lambda: clock[0], sleep=fake_sleep, max_runs=3)

    assert ran == [
        ("marketing", datetime(2024, 5, 15, 10, 0)),
        ("reset", datetime(2024, 5, 20, 0, 0)),
        ("marketing", datetime(2024, 5, 22, 10, 0)),
    ]


async def test_scheduler_keeps_going_after_failure():
    clock = [datetime(2024, 5, 13, 9, 0)]
    attempts = []

    async def fake_sleep(seconds):
        clock[0] += timedelta(seconds=seconds)

    async def broken():
        attempts.append(clock[0])
        raise RuntimeError("database unavailable")

    await run_scheduler(
        [WeeklyJob("broken", weekday=0, hour=0, run=broken)],
        clock=lambda: clock[0],
        sleep=fake_sleep,
        max_runs=2
    )

    assert attempts == [datetime(2024, 5, 20, 0, 0), datetime(2024, 5, 27, 0, 0)]
