"""Button platform for Workout Planner."""

from __future__ import annotations

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import WorkoutPlannerCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([ResyncRemindersButton(entry, coordinator)])


class ResyncRemindersButton(ButtonEntity):
    """Button to rebuild the scheduled training reminders."""

    _attr_has_entity_name = True
    _attr_name = "Resync reminders"
    _attr_icon = "mdi:bell-refresh"
    _attr_translation_key = "resync_reminders"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._attr_unique_id = f"{entry.entry_id}_resync_reminders"
        self._attr_device_info = device_info_from_entry(entry)

    async def async_press(self) -> None:
        await self._coordinator.async_resync_reminders()
