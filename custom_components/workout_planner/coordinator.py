"""Coordinator for Workout Planner."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import CONF_NOTIFY_SERVICE, DEFAULT_NOTIFY_SERVICE, DOMAIN, REMINDER_HORIZON_DAYS, SIGNAL_PLAN_UPDATED
from .planner import WorkoutPlanner
from .reminders import HassNotificationScheduler, ReminderSynchronizer
from .storage import WorkoutPlannerStore

_LOGGER = logging.getLogger(__name__)


class WorkoutPlannerCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Owns the store, the planner and the reminder sync for one entry."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        self.entry = entry
        self.store = WorkoutPlannerStore(hass, entry.entry_id)
        notify_service = entry.options.get(CONF_NOTIFY_SERVICE, entry.data.get(CONF_NOTIFY_SERVICE, DEFAULT_NOTIFY_SERVICE))
        self.notifier = HassNotificationScheduler(hass, notify_service=str(notify_service or ""))
        self.reminders = ReminderSynchronizer(self.store, self.notifier)
        self.planner = WorkoutPlanner(self.store, on_change=self.async_plan_changed)

        super().__init__(
            hass,
            logger=_LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            update_interval=timedelta(hours=6),
        )

    async def _async_update_data(self) -> dict[str, Any]:
        # Single source of truth is storage; entities/services write to it.
        return await self.store.async_load()

    async def async_resync_reminders(self, horizon_days: int = REMINDER_HORIZON_DAYS) -> bool:
        try:
            return await self.reminders.async_resync(horizon_days)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Reminder resync failed for entry_id=%s", self.entry.entry_id)
            return False

    async def async_plan_changed(self) -> None:
        """Run after every plan-affecting change."""
        await self.async_resync_reminders()
        async_dispatcher_send(self.hass, f"{SIGNAL_PLAN_UPDATED}_{self.entry.entry_id}")
        await self.async_request_refresh()
