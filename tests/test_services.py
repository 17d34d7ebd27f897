from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from typing import Any

import pytest
import voluptuous as vol

from custom_components.workout_planner.const import DOMAIN
from custom_components.workout_planner.exceptions import StorageIOError
from custom_components.workout_planner.planner import WorkoutPlanner
from custom_components.workout_planner.services import (
    _GET_DAYS_SCHEMA,
    _LOG_SCHEMA,
    _MOVE_SCHEMA,
    async_register,
    valid_date,
)
from custom_components.workout_planner.websocket_api import ws_add_workout
from custom_components.workout_planner.ws_state import export_config, public_state

from conftest import NOW, MemoryStore, make_store


def test_valid_date() -> None:
    assert valid_date("2026-03-16") == date(2026, 3, 16)
    assert valid_date(date(2026, 3, 16)) == date(2026, 3, 16)
    with pytest.raises(vol.Invalid):
        valid_date("tomorrow")


def test_log_schema_defaults_to_completed() -> None:
    data = _LOG_SCHEMA({"entry_id": "abc", "date": "2026-03-09", "workout_id": "w1", "duration_minutes": "45"})
    assert data["completed"] is True
    assert data["duration_minutes"] == 45
    assert isinstance(data["duration_minutes"], int)
    assert data["date"] == date(2026, 3, 9)


def test_move_schema_requires_both_dates() -> None:
    with pytest.raises(vol.Invalid):
        _MOVE_SCHEMA({"entry_id": "abc", "from_date": "2026-03-16", "workout_id": "w1"})


def test_get_days_schema_limits_window() -> None:
    assert _GET_DAYS_SCHEMA({"entry_id": "abc"})["days"] == 7
    with pytest.raises(vol.Invalid):
        _GET_DAYS_SCHEMA({"entry_id": "abc", "days": 0})
    with pytest.raises(vol.Invalid):
        _GET_DAYS_SCHEMA({"entry_id": "abc", "days": 32})


def test_export_config_has_only_plan_data() -> None:
    state = {
        "schema": 1,
        "rev": 4,
        "planned": {"2026-03-16": ""},
        "default_schedule": {"1": ["w1"]},
        "settings": {"reminder_enabled": True, "reminder_time_of_day": "noon"},
        "workouts": [{"id": "w1", "name": "Push"}],
        "updated_at": "2026-03-16T08:00:00+00:00",
    }
    assert public_state(state)["rev"] == 4
    assert export_config(state) == {
        "planned": {"2026-03-16": ""},
        "default_schedule": {"1": ["w1"]},
        "settings": {"reminder_enabled": True, "reminder_time_of_day": "noon"},
        "workouts": [{"id": "w1", "name": "Push"}],
    }


class _FakeServices:
    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}

    def has_service(self, domain: str, service: str) -> bool:
        return service in self.handlers

    def async_register(self, domain: str, service: str, handler, schema=None, supports_response=None) -> None:
        self.handlers[service] = handler


class _FakeConnection:
    def __init__(self) -> None:
        self.errors: list[tuple[int, str]] = []
        self.results: list[tuple[int, Any]] = []

    def send_error(self, msg_id: int, code: str, message: str) -> None:
        self.errors.append((msg_id, code))

    def send_result(self, msg_id: int, result: Any) -> None:
        self.results.append((msg_id, result))


def _hass(**store_kwargs) -> tuple[SimpleNamespace, MemoryStore]:
    store, backend = make_store(**store_kwargs)
    coordinator = SimpleNamespace(store=store, planner=WorkoutPlanner(store, now=lambda: NOW))
    hass = SimpleNamespace(data={DOMAIN: {"entry": coordinator}}, services=_FakeServices())
    return hass, backend


@pytest.mark.asyncio
async def test_past_days_are_locked_for_rescheduling_only() -> None:
    hass, backend = _hass(planned={"2026-03-09": ["w1"]})
    await async_register(hass)
    call = hass.services.handlers
    past, future = date(2026, 3, 9), date(2026, 3, 17)

    add = await call["add_workout"](SimpleNamespace(data={"entry_id": "entry", "date": past, "workout_id": "w2"}))
    remove = await call["remove_workout"](SimpleNamespace(data={"entry_id": "entry", "date": past, "index": 0}))
    move_out = await call["move_workout"](
        SimpleNamespace(data={"entry_id": "entry", "from_date": past, "to_date": future, "workout_id": "w1"})
    )
    move_in = await call["move_workout"](
        SimpleNamespace(data={"entry_id": "entry", "from_date": future, "to_date": past, "workout_id": "w1"})
    )
    assert [r["error"] for r in (add, remove, move_out, move_in)] == ["past_date_locked"] * 4
    assert backend.data["planned"] == {"2026-03-09": ["w1"]}

    logged = await call["log_workout"](
        SimpleNamespace(data={"entry_id": "entry", "date": past, "workout_id": "w2", "completed": True})
    )
    updated = await call["update_workout"](
        SimpleNamespace(data={"entry_id": "entry", "date": past, "index": 0, "completed": True})
    )
    assert logged["ok"] is True
    assert updated["ok"] is True
    assert backend.data["planned"]["2026-03-09"] == [
        {"workout_id": "w1", "completed": True},
        {"workout_id": "w2", "completed": True},
    ]


@pytest.mark.asyncio
async def test_unknown_workout_and_entry_are_reported() -> None:
    hass, _backend = _hass()
    await async_register(hass)
    call = hass.services.handlers

    missing = await call["add_workout"](
        SimpleNamespace(data={"entry_id": "entry", "date": date(2026, 3, 17), "workout_id": "nope"})
    )
    other_entry = await call["get_days"](SimpleNamespace(data={"entry_id": "other"}))

    assert missing == {"ok": False, "error": "workout_not_found"}
    assert other_entry == {"ok": False, "error": "entry_not_found"}


@pytest.mark.asyncio
async def test_websocket_reports_validation_errors_and_raises_storage_errors() -> None:
    hass, backend = _hass(planned={"2026-03-17": ["w1", "w2", "w3"]})
    connection = _FakeConnection()
    msg = {"id": 7, "type": "workout_planner/add_workout", "entry_id": "entry", "workout_id": "w4"}

    await ws_add_workout.__wrapped__(hass, connection, {**msg, "date": date(2026, 3, 17)})
    assert connection.errors == [(7, "capacity_exceeded")]

    backend.fail_save = True
    with pytest.raises(StorageIOError):
        await ws_add_workout.__wrapped__(hass, connection, {**msg, "date": date(2026, 3, 18)})
    assert connection.errors == [(7, "capacity_exceeded")]
    assert connection.results == []
