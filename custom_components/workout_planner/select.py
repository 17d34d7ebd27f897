"""Select platform for Workout Planner."""

from __future__ import annotations

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DEFAULT_REMINDER_TIME, DOMAIN, REMINDER_TIME_CHOICES, SIGNAL_PLAN_UPDATED
from .coordinator import WorkoutPlannerCoordinator
from .entity import device_info_from_entry


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([ReminderTimeSelect(entry, coordinator)])


class ReminderTimeSelect(SelectEntity):
    """Time of day for training reminders."""

    _attr_has_entity_name = True
    _attr_name = "Reminder time"
    _attr_icon = "mdi:clock-outline"
    _attr_translation_key = "reminder_time"
    _attr_options = list(REMINDER_TIME_CHOICES)

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        self._entry = entry
        self._coordinator = coordinator
        self._attr_unique_id = f"{entry.entry_id}_reminder_time"
        self._attr_device_info = device_info_from_entry(entry)
        self._unsub = None
        self._value = DEFAULT_REMINDER_TIME

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
    def current_option(self) -> str | None:
        return self._value

    async def async_select_option(self, option: str) -> None:
        if option not in REMINDER_TIME_CHOICES:
            return
        await self._coordinator.store.async_update_settings(reminder_time_of_day=option)
        await self._coordinator.async_plan_changed()
        await self._refresh_from_store()
        self.async_write_ha_state()

    async def _refresh_from_store(self) -> None:
        state = await self._coordinator.store.async_load()
        self._value = str(state["settings"].get("reminder_time_of_day") or DEFAULT_REMINDER_TIME)

    def _handle_updated(self) -> None:
        self.hass.async_create_task(self._async_reload_and_write())

    async def _async_reload_and_write(self) -> None:
        await self._refresh_from_store()
        self.async_write_ha_state()
