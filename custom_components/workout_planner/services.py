"""Services for Workout Planner."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse

from .const import DOMAIN, MAX_ENTRIES_PER_DAY, REMINDER_TIME_CHOICES
from .dates import parse_date_key
from .exceptions import PlanValidationError
from .planner import ensure_editable
from .storage import known_workout_ids

_LOGGER = logging.getLogger(__name__)

SERVICE_ADD_WORKOUT = "add_workout"
SERVICE_LOG_WORKOUT = "log_workout"
SERVICE_REMOVE_WORKOUT = "remove_workout"
SERVICE_UPDATE_WORKOUT = "update_workout"
SERVICE_MOVE_WORKOUT = "move_workout"
SERVICE_SET_DEFAULT_SCHEDULE = "set_default_schedule"
SERVICE_SET_REMINDERS = "set_reminders"
SERVICE_UPSERT_WORKOUT = "upsert_workout"
SERVICE_DELETE_WORKOUT = "delete_workout"
SERVICE_GET_DAYS = "get_days"
SERVICE_RESYNC_REMINDERS = "resync_reminders"


def valid_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_date_key(str(value))
    except ValueError as err:
        raise vol.Invalid(f"Invalid date: {value}") from err


_DURATION = vol.All(vol.Coerce(int), vol.Range(min=0))
_INDEX = vol.All(vol.Coerce(int), vol.Range(min=0))
_WEEKDAY = vol.All(vol.Coerce(int), vol.Range(min=0, max=6))

_ENTRY_SCHEMA = vol.Schema({vol.Required("entry_id"): str})
_ADD_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("workout_id"): str,
    }
)
_LOG_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("workout_id"): str,
        vol.Optional("completed", default=True): bool,
        vol.Optional("duration_minutes"): _DURATION,
    }
)
_REMOVE_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("index"): _INDEX,
    }
)
_UPDATE_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("index"): _INDEX,
        vol.Optional("completed"): bool,
        vol.Optional("duration_minutes"): vol.Any(None, _DURATION),
    }
)
_MOVE_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("from_date"): valid_date,
        vol.Required("to_date"): valid_date,
        vol.Required("workout_id"): str,
    }
)
_DEFAULT_SCHEDULE_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Required("weekday"): _WEEKDAY,
        vol.Required("workout_ids"): vol.All([str], vol.Length(max=MAX_ENTRIES_PER_DAY)),
    }
)
_REMINDERS_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("enabled"): bool,
        vol.Optional("time_of_day"): vol.In(REMINDER_TIME_CHOICES),
    }
)
_UPSERT_WORKOUT_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("workout_id"): str,
        vol.Required("name"): str,
        vol.Optional("exercise_count", default=0): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("duration_minutes"): _DURATION,
    }
)
_DELETE_WORKOUT_SCHEMA = vol.Schema({vol.Required("entry_id"): str, vol.Required("workout_id"): str})
_GET_DAYS_SCHEMA = vol.Schema(
    {
        vol.Required("entry_id"): str,
        vol.Optional("start"): valid_date,
        vol.Optional("days", default=7): vol.All(vol.Coerce(int), vol.Range(min=1, max=31)),
    }
)


def _error(code: str, message: str = "") -> dict[str, Any]:
    return {"ok": False, "error": code, **({"message": message} if message else {})}


async def async_register(hass: HomeAssistant) -> None:
    def _coordinator_for_entry(entry_id: str):
        return hass.data.get(DOMAIN, {}).get(entry_id)

    async def _workout_exists(coordinator, workout_id: str) -> bool:
        state = await coordinator.store.async_load()
        return workout_id in known_workout_ids(state)

    async def _async_add(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        workout_id = str(call.data["workout_id"]).strip()
        if not await _workout_exists(coordinator, workout_id):
            return _error("workout_not_found")
        try:
            ensure_editable(call.data["date"], coordinator.planner.today_key())
            entries = await coordinator.planner.async_add(call.data["date"], workout_id)
        except PlanValidationError as err:
            return _error(err.code, str(err))
        return {"ok": True, "entry_id": entry_id, "entries": entries}

    async def _async_log(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        workout_id = str(call.data["workout_id"]).strip()
        if not await _workout_exists(coordinator, workout_id):
            return _error("workout_not_found")
        try:
            entries = await coordinator.planner.async_add_with_details(
                call.data["date"],
                workout_id,
                completed=bool(call.data.get("completed", True)),
                duration_minutes=call.data.get("duration_minutes"),
            )
        except PlanValidationError as err:
            return _error(err.code, str(err))
        return {"ok": True, "entry_id": entry_id, "entries": entries}

    async def _async_remove(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        try:
            ensure_editable(call.data["date"], coordinator.planner.today_key())
        except PlanValidationError as err:
            return _error(err.code, str(err))
        entries = await coordinator.planner.async_remove_at(call.data["date"], int(call.data["index"]))
        return {"ok": True, "entry_id": entry_id, "entries": entries}

    async def _async_update(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        patch = {k: call.data[k] for k in ("completed", "duration_minutes") if k in call.data}
        entries = await coordinator.planner.async_update_at(call.data["date"], int(call.data["index"]), patch)
        return {"ok": True, "entry_id": entry_id, "entries": entries}

    async def _async_move(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        today = coordinator.planner.today_key()
        try:
            ensure_editable(call.data["from_date"], today)
            ensure_editable(call.data["to_date"], today)
            moved = await coordinator.planner.async_move(
                call.data["from_date"], call.data["to_date"], str(call.data["workout_id"]).strip()
            )
        except PlanValidationError as err:
            return _error(err.code, str(err))
        return {"ok": True, "entry_id": entry_id, "moved": moved}

    async def _async_set_default_schedule(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        state = await coordinator.store.async_load()
        known = known_workout_ids(state)
        ids = [str(w).strip() for w in call.data["workout_ids"]]
        unknown = [w for w in ids if w not in known]
        if unknown:
            return _error("workout_not_found", ", ".join(unknown))
        ids = await coordinator.planner.async_set_default_schedule_day(int(call.data["weekday"]), ids)
        return {"ok": True, "entry_id": entry_id, "weekday": int(call.data["weekday"]), "workout_ids": ids}

    async def _async_set_reminders(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        state = await coordinator.store.async_update_settings(
            reminder_enabled=call.data.get("enabled"),
            reminder_time_of_day=call.data.get("time_of_day"),
        )
        await coordinator.async_plan_changed()
        return {"ok": True, "entry_id": entry_id, "settings": state["settings"], "reminders": coordinator.reminders.last_result}

    async def _async_upsert_workout(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        workout: dict[str, Any] = {
            "name": str(call.data["name"]).strip(),
            "exercise_count": int(call.data.get("exercise_count") or 0),
        }
        if call.data.get("workout_id"):
            workout["id"] = str(call.data["workout_id"]).strip()
        if call.data.get("duration_minutes") is not None:
            workout["duration_minutes"] = call.data["duration_minutes"]
        try:
            state = await coordinator.store.async_upsert_workout(workout)
        except ValueError as err:
            return _error("invalid_workout", str(err))
        await coordinator.async_plan_changed()
        return {"ok": True, "entry_id": entry_id, "workouts": state["workouts"]}

    async def _async_delete_workout(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        state = await coordinator.store.async_delete_workout(str(call.data["workout_id"]).strip())
        await coordinator.async_plan_changed()
        return {"ok": True, "entry_id": entry_id, "workouts": state["workouts"]}

    async def _async_get_days(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        start = call.data.get("start") or parse_date_key(coordinator.planner.today_key())
        days = await coordinator.planner.async_days(start, int(call.data.get("days") or 7))
        return {"ok": True, "entry_id": entry_id, "days": days}

    async def _async_resync(call: ServiceCall) -> ServiceResponse:
        entry_id = str(call.data["entry_id"])
        coordinator = _coordinator_for_entry(entry_id)
        if coordinator is None:
            return _error("entry_not_found")
        scheduled = await coordinator.async_resync_reminders()
        return {"ok": True, "entry_id": entry_id, "scheduled": scheduled, "reminders": coordinator.reminders.last_result}

    services = (
        (SERVICE_ADD_WORKOUT, _async_add, _ADD_SCHEMA),
        (SERVICE_LOG_WORKOUT, _async_log, _LOG_SCHEMA),
        (SERVICE_REMOVE_WORKOUT, _async_remove, _REMOVE_SCHEMA),
        (SERVICE_UPDATE_WORKOUT, _async_update, _UPDATE_SCHEMA),
        (SERVICE_MOVE_WORKOUT, _async_move, _MOVE_SCHEMA),
        (SERVICE_SET_DEFAULT_SCHEDULE, _async_set_default_schedule, _DEFAULT_SCHEDULE_SCHEMA),
        (SERVICE_SET_REMINDERS, _async_set_reminders, _REMINDERS_SCHEMA),
        (SERVICE_UPSERT_WORKOUT, _async_upsert_workout, _UPSERT_WORKOUT_SCHEMA),
        (SERVICE_DELETE_WORKOUT, _async_delete_workout, _DELETE_WORKOUT_SCHEMA),
        (SERVICE_GET_DAYS, _async_get_days, _GET_DAYS_SCHEMA),
        (SERVICE_RESYNC_REMINDERS, _async_resync, _ENTRY_SCHEMA),
    )
    for name, handler, schema in services:
        if hass.services.has_service(DOMAIN, name):
            continue
        hass.services.async_register(
            DOMAIN,
            name,
            handler,
            schema=schema,
            supports_response=SupportsResponse.OPTIONAL,
        )
    _LOGGER.debug("Registered %s services", len(services))
