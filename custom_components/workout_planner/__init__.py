"""Workout Planner integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.event import async_track_time_change

from .const import DOMAIN, PLATFORMS
from .coordinator import WorkoutPlannerCoordinator
from .services import async_register as async_register_services
from .websocket_api import async_register as async_register_ws

_LOGGER = logging.getLogger(__name__)


def _schedule_nightly_resync(*, hass: HomeAssistant, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
    """Roll the reminder horizon forward shortly after midnight (local time)."""

    async def _run(_now) -> None:
        await coordinator.async_resync_reminders()
        await coordinator.async_request_refresh()

    remove = async_track_time_change(hass, _run, hour=0, minute=5, second=0)
    entry.async_on_unload(remove)


async def _async_register_domain_resources(hass: HomeAssistant) -> None:
    """Register domain-wide resources once."""
    hass.data.setdefault(DOMAIN, {})

    if not hass.data[DOMAIN].get("ws_registered"):
        async_register_ws(hass)
        hass.data[DOMAIN]["ws_registered"] = True

    if not hass.data[DOMAIN].get("services_registered"):
        await async_register_services(hass)
        hass.data[DOMAIN]["services_registered"] = True


async def async_setup(hass: HomeAssistant, _config: dict[str, Any]) -> bool:
    """Set up domain-level resources."""
    await _async_register_domain_resources(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up from a config entry."""
    await _async_register_domain_resources(hass)

    coordinator = WorkoutPlannerCoordinator(hass, entry)
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = coordinator
    _schedule_nightly_resync(hass=hass, entry=entry, coordinator=coordinator)
    entry.async_on_unload(coordinator.notifier.async_cancel_all)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    await coordinator.async_resync_reminders()
    _LOGGER.debug("Setup complete for entry_id=%s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update by reloading."""
    await hass.config_entries.async_reload(entry.entry_id)
