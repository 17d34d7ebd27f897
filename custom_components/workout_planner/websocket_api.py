"""Websocket API for Workout Planner."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant

from .const import DOMAIN, MAX_ENTRIES_PER_DAY
from .dates import parse_date_key
from .exceptions import PlanValidationError
from .planner import ensure_editable
from .services import valid_date
from .storage import known_workout_ids
from .ws_state import export_config, public_state, runtime_payload


def _coordinator(hass: HomeAssistant, connection: websocket_api.ActiveConnection, msg: dict[str, Any]):
    entry_id = msg["entry_id"]
    coordinator = hass.data.get(DOMAIN, {}).get(entry_id)
    if coordinator is None:
        connection.send_error(msg["id"], "entry_not_found", f"No entry found for entry_id={entry_id}")
    return coordinator


async def _send_state(coordinator, connection: websocket_api.ActiveConnection, msg: dict[str, Any]) -> None:
    state = await coordinator.store.async_load()
    connection.send_result(msg["id"], public_state(state, runtime=runtime_payload()))


@websocket_api.websocket_command({vol.Required("type"): "workout_planner/list_entries"})
@websocket_api.async_response
async def ws_list_entries(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    entries = hass.config_entries.async_entries(DOMAIN)
    payload = [{"entry_id": entry.entry_id, "title": entry.title} for entry in entries]
    connection.send_result(msg["id"], {"entries": payload})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/get_state",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_get_state(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/get_days",
        vol.Required("entry_id"): str,
        vol.Optional("start"): valid_date,
        vol.Optional("days", default=7): vol.All(vol.Coerce(int), vol.Range(min=1, max=31)),
    }
)
@websocket_api.async_response
async def ws_get_days(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    start = msg.get("start") or parse_date_key(coordinator.planner.today_key())
    days = await coordinator.planner.async_days(start, int(msg["days"]))
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "days": days})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/add_workout",
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("workout_id"): str,
    }
)
@websocket_api.async_response
async def ws_add_workout(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    state = await coordinator.store.async_load()
    if msg["workout_id"] not in known_workout_ids(state):
        connection.send_error(msg["id"], "workout_not_found", f"Unknown workout {msg['workout_id']}")
        return
    try:
        ensure_editable(msg["date"], coordinator.planner.today_key())
        await coordinator.planner.async_add(msg["date"], msg["workout_id"])
    except PlanValidationError as e:
        connection.send_error(msg["id"], e.code, str(e))
        return
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/log_workout",
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("workout_id"): str,
        vol.Optional("completed", default=True): bool,
        vol.Optional("duration_minutes"): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)
@websocket_api.async_response
async def ws_log_workout(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    state = await coordinator.store.async_load()
    if msg["workout_id"] not in known_workout_ids(state):
        connection.send_error(msg["id"], "workout_not_found", f"Unknown workout {msg['workout_id']}")
        return
    try:
        await coordinator.planner.async_add_with_details(
            msg["date"],
            msg["workout_id"],
            completed=msg["completed"],
            duration_minutes=msg.get("duration_minutes"),
        )
    except PlanValidationError as e:
        connection.send_error(msg["id"], e.code, str(e))
        return
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/remove_workout",
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("index"): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)
@websocket_api.async_response
async def ws_remove_workout(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    try:
        ensure_editable(msg["date"], coordinator.planner.today_key())
        await coordinator.planner.async_remove_at(msg["date"], msg["index"])
    except PlanValidationError as e:
        connection.send_error(msg["id"], e.code, str(e))
        return
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/update_workout",
        vol.Required("entry_id"): str,
        vol.Required("date"): valid_date,
        vol.Required("index"): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("completed"): bool,
        vol.Optional("duration_minutes"): vol.Any(None, vol.All(vol.Coerce(int), vol.Range(min=0))),
    }
)
@websocket_api.async_response
async def ws_update_workout(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    patch = {k: msg[k] for k in ("completed", "duration_minutes") if k in msg}
    await coordinator.planner.async_update_at(msg["date"], msg["index"], patch)
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/move_workout",
        vol.Required("entry_id"): str,
        vol.Required("from_date"): valid_date,
        vol.Required("to_date"): valid_date,
        vol.Required("workout_id"): str,
    }
)
@websocket_api.async_response
async def ws_move_workout(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    today = coordinator.planner.today_key()
    try:
        ensure_editable(msg["from_date"], today)
        ensure_editable(msg["to_date"], today)
        moved = await coordinator.planner.async_move(msg["from_date"], msg["to_date"], msg["workout_id"])
    except PlanValidationError as e:
        connection.send_error(msg["id"], e.code, str(e))
        return
    if not moved:
        connection.send_error(msg["id"], "not_found", f"{msg['workout_id']} is not planned on {msg['from_date']}")
        return
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/set_default_schedule",
        vol.Required("entry_id"): str,
        vol.Required("weekday"): vol.All(vol.Coerce(int), vol.Range(min=0, max=6)),
        vol.Required("workout_ids"): vol.All([str], vol.Length(max=MAX_ENTRIES_PER_DAY)),
    }
)
@websocket_api.async_response
async def ws_set_default_schedule(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    state = await coordinator.store.async_load()
    unknown = [w for w in msg["workout_ids"] if w not in known_workout_ids(state)]
    if unknown:
        connection.send_error(msg["id"], "workout_not_found", f"Unknown workouts: {', '.join(unknown)}")
        return
    await coordinator.planner.async_set_default_schedule_day(msg["weekday"], msg["workout_ids"])
    await _send_state(coordinator, connection, msg)


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/export_config",
        vol.Required("entry_id"): str,
    }
)
@websocket_api.async_response
async def ws_export_config(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    state = await coordinator.store.async_load()
    connection.send_result(msg["id"], {"entry_id": msg["entry_id"], "config": export_config(state)})


@websocket_api.websocket_command(
    {
        vol.Required("type"): "workout_planner/import_config",
        vol.Required("entry_id"): str,
        vol.Required("config"): dict,
    }
)
@websocket_api.async_response
async def ws_import_config(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    coordinator = _coordinator(hass, connection, msg)
    if coordinator is None:
        return
    await coordinator.store.async_import(msg["config"])
    await coordinator.async_plan_changed()
    await _send_state(coordinator, connection, msg)


def async_register(hass: HomeAssistant) -> None:
    websocket_api.async_register_command(hass, ws_list_entries)
    websocket_api.async_register_command(hass, ws_get_state)
    websocket_api.async_register_command(hass, ws_get_days)
    websocket_api.async_register_command(hass, ws_add_workout)
    websocket_api.async_register_command(hass, ws_log_workout)
    websocket_api.async_register_command(hass, ws_remove_workout)
    websocket_api.async_register_command(hass, ws_update_workout)
    websocket_api.async_register_command(hass, ws_move_workout)
    websocket_api.async_register_command(hass, ws_set_default_schedule)
    websocket_api.async_register_command(hass, ws_export_config)
    websocket_api.async_register_command(hass, ws_import_config)
