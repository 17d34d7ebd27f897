from __future__ import annotations

from datetime import datetime

import pytest

from homeassistant.util import dt as dt_util

from custom_components.workout_planner.reminders import REMINDER_TITLE, ReminderSynchronizer, reminder_body

from conftest import NOW, FakeScheduler, make_store


def _sync(scheduler: FakeScheduler, **kwargs) -> ReminderSynchronizer:
    kwargs.setdefault("settings", {"reminder_enabled": True, "reminder_time_of_day": "morning"})
    store, _backend = make_store(**kwargs)
    return ReminderSynchronizer(store, scheduler, now=lambda: NOW)


def _dates(scheduler: FakeScheduler) -> list[str]:
    return [when.date().isoformat() for when, _title, _body in scheduler.scheduled]


@pytest.mark.asyncio
async def test_disabled_cancels_everything() -> None:
    scheduler = FakeScheduler()
    sync = _sync(scheduler, settings={"reminder_enabled": False}, default_schedule={"1": ["w1"]})

    assert await sync.async_resync() is False
    assert scheduler.cancel_calls == 1
    assert scheduler.scheduled == []
    assert sync.last_result["status"] == "disabled"


@pytest.mark.asyncio
async def test_no_permission_schedules_nothing() -> None:
    scheduler = FakeScheduler(permission=False)
    sync = _sync(scheduler, default_schedule={"1": ["w1"]})

    assert await sync.async_resync() is False
    assert scheduler.scheduled == []
    assert sync.last_result["status"] == "no_permission"


@pytest.mark.asyncio
async def test_permission_granted_on_request() -> None:
    scheduler = FakeScheduler(permission=False, grant_on_request=True)
    sync = _sync(scheduler, default_schedule={"1": ["w1"]})

    assert await sync.async_resync() is True


@pytest.mark.asyncio
async def test_one_reminder_per_planned_day_in_horizon() -> None:
    scheduler = FakeScheduler()
    sync = _sync(scheduler, default_schedule={"1": ["w1", "w2"]})

    assert await sync.async_resync() is True

    # Today's 07:00 slot has already passed at 09:00.
    assert _dates(scheduler) == ["2026-03-23", "2026-03-30", "2026-04-06", "2026-04-13"]
    assert all(when.hour == 7 for when, _title, _body in scheduler.scheduled)
    assert scheduler.scheduled[0][1] == REMINDER_TITLE
    assert scheduler.scheduled[0][2] == reminder_body("Push")
    assert sync.last_result == {"at": NOW.isoformat(), "status": "ok", "scheduled": 4}


@pytest.mark.asyncio
async def test_evening_reminder_for_today_and_overrides() -> None:
    scheduler = FakeScheduler()
    sync = _sync(
        scheduler,
        settings={"reminder_enabled": True, "reminder_time_of_day": "evening"},
        default_schedule={"1": ["w1"]},
        planned={"2026-03-23": "", "2026-03-25": ["gone"]},
    )

    await sync.async_resync()

    assert _dates(scheduler) == ["2026-03-16", "2026-03-25", "2026-03-30", "2026-04-06", "2026-04-13"]
    assert scheduler.scheduled[0][0].hour == 17
    # The override points at a workout that no longer exists.
    assert scheduler.scheduled[1][2] == reminder_body(None)


@pytest.mark.asyncio
async def test_failed_schedule_is_skipped() -> None:
    scheduler = FakeScheduler()
    scheduler.fail_at = {"2026-03-30"}
    sync = _sync(scheduler, default_schedule={"1": ["w1"]})

    assert await sync.async_resync() is True
    assert _dates(scheduler) == ["2026-03-23", "2026-04-06", "2026-04-13"]


@pytest.mark.asyncio
async def test_resync_replaces_previous_reminders() -> None:
    scheduler = FakeScheduler()
    sync = _sync(scheduler, default_schedule={"1": ["w1"]})

    await sync.async_resync()
    await sync.async_resync()

    assert scheduler.cancel_calls == 2
    assert len(scheduler.scheduled) == 4


@pytest.mark.asyncio
async def test_empty_plan_schedules_nothing() -> None:
    scheduler = FakeScheduler()
    sync = _sync(scheduler)

    assert await sync.async_resync(horizon_days=7) is False
    assert sync.last_result["status"] == "ok"


def test_reminder_body() -> None:
    assert "Push" in reminder_body("Push")
    assert reminder_body("") == reminder_body(None)


@pytest.mark.asyncio
async def test_evening_reminder_reads_its_own_day_west_of_utc() -> None:
    # 17:00 in Los Angeles is already the next day in UTC.
    los_angeles = dt_util.get_time_zone("America/Los_Angeles")
    dt_util.set_default_time_zone(los_angeles)
    now = datetime(2026, 3, 16, 9, 0, tzinfo=los_angeles)
    scheduler = FakeScheduler()
    store, _backend = make_store(
        settings={"reminder_enabled": True, "reminder_time_of_day": "evening"},
        default_schedule={"1": ["w1"]},
        planned={"2026-03-17": ["w2"], "2026-03-23": ["w3"], "2026-03-24": ""},
    )
    sync = ReminderSynchronizer(store, scheduler, now=lambda: now)

    await sync.async_resync(horizon_days=9)

    assert _dates(scheduler) == ["2026-03-16", "2026-03-17", "2026-03-23"]
    assert [body for _when, _title, body in scheduler.scheduled] == [
        reminder_body("Push"),
        reminder_body("Pull"),
        reminder_body("Legs"),
    ]
    assert all(when.hour == 17 for when, _title, _body in scheduler.scheduled)
