"""Storage for Workout Planner (.storage).

State model (schema v1):
- planned: mapping date key (YYYY-MM-DD) -> stored plan value (see schedule.py)
- default_schedule: mapping weekday "0".."6" (0=Sunday) -> up to 3 workout ids
- settings: reminder flag and time of day
- workouts: workout catalog [{id, name, exercise_count, duration_minutes?}]
- rev: monotonic revision so the UI can detect changes
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import DEFAULT_REMINDER_TIME, DOMAIN, REMINDER_HOURS
from .exceptions import StorageIOError
from .schedule import normalize_schedule_slot

_STORAGE_VERSION = 1


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _empty_schedule() -> dict[str, list[str]]:
    return {str(d): [] for d in range(7)}


def _normalize_schedule(raw: Any) -> dict[str, list[str]]:
    schedule = _empty_schedule()
    if not isinstance(raw, dict):
        return schedule
    for key, value in raw.items():
        try:
            weekday = int(key)
        except (TypeError, ValueError):
            continue
        if 0 <= weekday <= 6:
            schedule[str(weekday)] = normalize_schedule_slot(value)
    return schedule


def _normalize_settings(raw: Any) -> dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    # Older exports used the app's camelCase names.
    enabled = raw.get("reminder_enabled", raw.get("trainingReminderEnabled"))
    time_of_day = str(raw.get("reminder_time_of_day") or raw.get("trainingReminderTimeOfDay") or "").lower()
    if time_of_day not in REMINDER_HOURS:
        time_of_day = DEFAULT_REMINDER_TIME
    return {
        "reminder_enabled": enabled if isinstance(enabled, bool) else False,
        "reminder_time_of_day": time_of_day,
    }


def _normalize_workout(raw: dict[str, Any], *, touch: bool = False) -> dict[str, Any] | None:
    name = str(raw.get("name") or "").strip()
    if not name:
        return None
    workout_id = str(raw.get("id") or "").strip() or f"workout_{uuid4().hex[:10]}"
    exercises = raw.get("exercises")
    try:
        exercise_count = int(raw.get("exercise_count", len(exercises) if isinstance(exercises, list) else 0) or 0)
    except (TypeError, ValueError):
        exercise_count = 0
    now = _now_iso()
    workout: dict[str, Any] = {
        "id": workout_id,
        "name": name,
        "exercise_count": max(0, exercise_count),
        "created_at": str(raw.get("created_at") or "").strip() or now,
        "updated_at": now if touch else (str(raw.get("updated_at") or "").strip() or now),
    }
    duration = raw.get("duration_minutes")
    if isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0:
        workout["duration_minutes"] = duration
    return workout


def list_workouts(state: dict[str, Any]) -> list[dict[str, Any]]:
    workouts = state.get("workouts") if isinstance(state, dict) else None
    return [w for w in workouts if isinstance(w, dict)] if isinstance(workouts, list) else []


def workout_names(state: dict[str, Any]) -> dict[str, str]:
    return {str(w.get("id") or ""): str(w.get("name") or "") for w in list_workouts(state) if w.get("id")}


def known_workout_ids(state: dict[str, Any]) -> set[str]:
    return set(workout_names(state))


class WorkoutPlannerStore:
    """Per-config-entry storage wrapper.

    `store` lets callers provide any object with async_load/async_save
    (tests use an in-memory backend).
    """

    def __init__(self, hass: HomeAssistant | None, entry_id: str, *, store: Any = None) -> None:
        self._store = store if store is not None else Store(hass, _STORAGE_VERSION, f"{DOMAIN}_{entry_id}")
        self._data: dict[str, Any] | None = None

    async def async_load(self) -> dict[str, Any]:
        if self._data is None:
            try:
                loaded = await self._store.async_load()
            except (OSError, HomeAssistantError) as err:
                raise StorageIOError(f"Failed to load planner data: {err}") from err
            data = loaded if isinstance(loaded, dict) else {}

            data.setdefault("schema", 1)
            data.setdefault("rev", 1)
            planned = data.get("planned")
            data["planned"] = planned if isinstance(planned, dict) else {}
            data["default_schedule"] = _normalize_schedule(data.get("default_schedule"))
            data["settings"] = _normalize_settings(data.get("settings"))
            data["workouts"] = [w for w in (_normalize_workout(x) for x in list_workouts(data)) if w]
            data.setdefault("updated_at", _now_iso())
            self._data = data

        return self._copy(self._data)

    @staticmethod
    def _copy(state: dict[str, Any]) -> dict[str, Any]:
        # Nested containers are copied so callers can edit freely before saving.
        out = dict(state)
        out["planned"] = dict(state.get("planned") or {})
        out["default_schedule"] = {k: list(v) for k, v in (state.get("default_schedule") or {}).items()}
        out["settings"] = dict(state.get("settings") or {})
        out["workouts"] = [dict(w) for w in list_workouts(state)]
        return out

    async def async_save(self, state: dict[str, Any]) -> dict[str, Any]:
        next_state = dict(state or {})
        next_state["schema"] = 1
        next_state["rev"] = int(next_state.get("rev") or 1) + 1
        next_state["updated_at"] = _now_iso()
        try:
            await self._store.async_save(next_state)
        except (OSError, HomeAssistantError) as err:
            raise StorageIOError(f"Failed to save planner data: {err}") from err
        # Only replace the cached document once the write went through.
        self._data = next_state
        return self._copy(self._data)

    async def async_save_planned_workout(self, date_key: str, value: Any) -> dict[str, Any]:
        state = await self.async_load()
        state["planned"][str(date_key)] = value
        return await self.async_save(state)

    async def async_apply_planned_changes(
        self, *, writes: dict[str, Any] | None = None, deletes: list[str] | None = None
    ) -> dict[str, Any]:
        """Apply several planned-map writes/deletes in one save."""
        if not writes and not deletes:
            return await self.async_load()
        state = await self.async_load()
        planned = state["planned"]
        for key in deletes or []:
            planned.pop(str(key), None)
        for key, value in (writes or {}).items():
            planned[str(key)] = value
        return await self.async_save(state)

    async def async_set_default_schedule_day(self, weekday: int, workout_ids: list[str]) -> dict[str, Any]:
        weekday = int(weekday)
        if not 0 <= weekday <= 6:
            raise ValueError(f"weekday must be 0..6, got {weekday}")
        state = await self.async_load()
        state["default_schedule"][str(weekday)] = normalize_schedule_slot(list(workout_ids or []))
        return await self.async_save(state)

    async def async_update_settings(
        self, *, reminder_enabled: bool | None = None, reminder_time_of_day: str | None = None
    ) -> dict[str, Any]:
        state = await self.async_load()
        settings = state["settings"]
        if reminder_enabled is not None:
            settings["reminder_enabled"] = bool(reminder_enabled)
        if reminder_time_of_day is not None:
            settings["reminder_time_of_day"] = str(reminder_time_of_day).lower()
        state["settings"] = _normalize_settings(settings)
        return await self.async_save(state)

    async def async_upsert_workout(self, workout: dict[str, Any]) -> dict[str, Any]:
        state = await self.async_load()
        workouts = state["workouts"]
        workout_id = str(workout.get("id") or "").strip()
        existing = next((w for w in workouts if w.get("id") == workout_id), None) if workout_id else None
        merged = {**(existing or {}), **workout}
        normalized = _normalize_workout(merged, touch=True)
        if normalized is None:
            raise ValueError("Workout name is required")
        if existing is not None:
            state["workouts"] = [normalized if w.get("id") == workout_id else w for w in workouts]
        else:
            state["workouts"] = [*workouts, normalized]
        return await self.async_save(state)

    async def async_delete_workout(self, workout_id: str) -> dict[str, Any]:
        """Remove a workout definition. Planned entries are kept for history."""
        state = await self.async_load()
        workouts = state["workouts"]
        remaining = [w for w in workouts if w.get("id") != str(workout_id)]
        if len(remaining) == len(workouts):
            return state
        state["workouts"] = remaining
        return await self.async_save(state)

    async def async_import(self, config: dict[str, Any]) -> dict[str, Any]:
        """Replace plan data from an export (ours or the mobile app's camelCase one)."""
        state = await self.async_load()
        planned = config.get("planned", config.get("plannedWorkouts"))
        schedule = config.get("default_schedule", config.get("defaultSchedule"))
        workouts = config.get("workouts")
        if isinstance(planned, dict):
            state["planned"] = {str(k): v for k, v in planned.items()}
        if isinstance(schedule, dict):
            state["default_schedule"] = _normalize_schedule(schedule)
        if isinstance(workouts, list):
            state["workouts"] = [w for w in (_normalize_workout(x) for x in workouts if isinstance(x, dict)) if w]
        if isinstance(config.get("settings"), dict):
            state["settings"] = _normalize_settings(config["settings"])
        return await self.async_save(state)
