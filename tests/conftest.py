from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

import pytest

from homeassistant.util import dt as dt_util

from custom_components.workout_planner.storage import WorkoutPlannerStore

BERLIN = dt_util.get_time_zone("Europe/Berlin")

# Monday morning.
NOW = datetime(2026, 3, 16, 9, 0, tzinfo=BERLIN)

WORKOUTS = [
    {"id": "w1", "name": "Push", "exercise_count": 5, "duration_minutes": 45},
    {"id": "w2", "name": "Pull", "exercise_count": 4},
    {"id": "w3", "name": "Legs", "exercise_count": 6, "duration_minutes": 60},
    {"id": "w4", "name": "Core", "exercise_count": 3},
]


class MemoryStore:
    """In-memory stand-in for homeassistant.helpers.storage.Store."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = copy.deepcopy(data)
        self.saves = 0
        self.fail_save = False

    async def async_load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.data)

    async def async_save(self, data: dict[str, Any]) -> None:
        if self.fail_save:
            raise OSError("disk full")
        self.saves += 1
        self.data = copy.deepcopy(data)


class FakeScheduler:
    def __init__(self, *, permission: bool = True, grant_on_request: bool = False) -> None:
        self.permission = permission
        self.grant_on_request = grant_on_request
        self.scheduled: list[tuple[datetime, str, str]] = []
        self.cancel_calls = 0
        self.fail_at: set[str] = set()

    async def async_has_permission(self) -> bool:
        return self.permission

    async def async_request_permission(self) -> bool:
        if self.grant_on_request:
            self.permission = True
        return self.permission

    async def async_cancel_all(self) -> None:
        self.cancel_calls += 1
        self.scheduled = []

    async def async_schedule_at(self, when: datetime, title: str, body: str) -> None:
        if when.date().isoformat() in self.fail_at:
            raise RuntimeError("scheduler rejected reminder")
        self.scheduled.append((when, title, body))


@pytest.fixture(autouse=True)
def berlin_time_zone():
    dt_util.set_default_time_zone(BERLIN)
    yield
    dt_util.set_default_time_zone(dt_util.UTC)


def make_store(
    *,
    planned: dict[str, Any] | None = None,
    default_schedule: dict[str, Any] | None = None,
    settings: dict[str, Any] | None = None,
    workouts: list[dict[str, Any]] | None = None,
) -> tuple[WorkoutPlannerStore, MemoryStore]:
    backend = MemoryStore(
        {
            "planned": planned or {},
            "default_schedule": default_schedule or {},
            "settings": settings or {},
            "workouts": WORKOUTS if workouts is None else workouts,
        }
    )
    return WorkoutPlannerStore(None, "test", store=backend), backend
