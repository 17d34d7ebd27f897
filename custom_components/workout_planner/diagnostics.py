"""Diagnostics support for Workout Planner.

This file is picked up by Home Assistant automatically when present.
"""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant,
    entry: ConfigEntry,
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    payload: dict[str, Any] = {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "version": entry.version,
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
    }

    if coordinator is not None:
        state = await coordinator.store.async_load()
        payload["coordinator"] = {
            "last_update_success": bool(getattr(coordinator, "last_update_success", False)),
            "last_exception": repr(getattr(coordinator, "last_exception", None)),
        }
        payload["state"] = {
            "rev": state.get("rev"),
            "planned_days": len(state["planned"]),
            "default_schedule": state["default_schedule"],
            "settings": state["settings"],
            "workouts": len(state["workouts"]),
        }
        payload["reminders"] = {
            "last_result": dict(coordinator.reminders.last_result),
            "scheduled": list(coordinator.notifier.scheduled),
        }

    return payload
