"""Switch platform for Workout Planner."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, SIGNAL_PLAN_UPDATED
from .coordinator import WorkoutPlannerCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([TrainingRemindersSwitch(entry, coordinator)])


class TrainingRemindersSwitch(SwitchEntity):
    """Turns training reminders on or off."""

    _attr_has_entity_name = True
    _attr_name = "Training reminders"
    _attr_icon = "mdi:bell-ring-outline"
    _attr_translation_key = "training_reminders"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._attr_unique_id = f"{entry.entry_id}_training_reminders"
        self._attr_device_info = device_info_from_entry(entry)
        self._unsub = None
        self._value = False

    async def async_added_to_hass(self) -> None:
        self._unsub = async_dispatcher_connect(
            self.hass,
            f"{SIGNAL_PLAN_UPDATED}_{self._entry.entry_id}",
            self._handle_updated,
        )
        await self._refresh_from_store()

    async def async_will_remove_from_hass(self) -> None:
        if self._unsub:
            self._unsub()
            self._unsub = None

    @property
    def is_on(self) -> bool:
        return self._value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        return {
            "last_sync": dict(self._coordinator.reminders.last_result),
            "scheduled": len(self._coordinator.notifier.scheduled),
        }

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._async_set(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._async_set(False)

    async def _async_set(self, enabled: bool) -> None:
        await self._coordinator.store.async_update_settings(reminder_enabled=enabled)
        await self._coordinator.async_plan_changed()
        await self._refresh_from_store()
        self.async_write_ha_state()

    async def _refresh_from_store(self) -> None:
        state = await self._coordinator.store.async_load()
        self._value = bool(state["settings"].get("reminder_enabled"))

    def _handle_updated(self) -> None:
        self.hass.async_create_task(self._async_reload_and_write())

    async def _async_reload_and_write(self) -> None:
        await self._refresh_from_store()
        self.async_write_ha_state()
