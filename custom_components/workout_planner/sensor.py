"""Sensor platform for Workout Planner."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import WorkoutPlannerCoordinator
from .dates import local_now, to_local_date_key
from .entity import device_info_from_entry
from .schedule import describe_day
from .stats import weekly_completed_counts, year_stats
from .storage import workout_names


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: WorkoutPlannerCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([TodayPlanSensor(entry, coordinator), TrainingStatsSensor(entry, coordinator)])


class TodayPlanSensor(CoordinatorEntity[WorkoutPlannerCoordinator], SensorEntity):
    """Number of workouts planned for today, with the entries as attributes."""

    _attr_has_entity_name = True
    _attr_name = "Today's plan"
    _attr_icon = "mdi:dumbbell"
    _attr_translation_key = "today_plan"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_today_plan"
        self._attr_device_info = device_info_from_entry(entry)

    def _today(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        now = local_now()
        return describe_day(
            now,
            data.get("planned", {}),
            data.get("default_schedule", {}),
            workout_names(data),
            to_local_date_key(now),
        )

    @property
    def native_value(self) -> int:
        return len(self._today()["entries"])

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        day = self._today()
        data = self.coordinator.data or {}
        return {
            "entry_id": self._entry.entry_id,
            "date": day["date"],
            "is_override": day["is_override"],
            "entries": day["entries"],
            "workouts": [e["name"] for e in day["entries"] if e["name"]],
            "updated_at": str(data.get("updated_at") or ""),
        }


class TrainingStatsSensor(CoordinatorEntity[WorkoutPlannerCoordinator], SensorEntity):
    """Completed trainings this year."""

    _attr_has_entity_name = True
    _attr_name = "Trainings this year"
    _attr_icon = "mdi:trophy"
    _attr_translation_key = "trainings_this_year"
    _attr_native_unit_of_measurement = "trainings"

    def __init__(self, entry: ConfigEntry, coordinator: WorkoutPlannerCoordinator) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_trainings_this_year"
        self._attr_device_info = device_info_from_entry(entry)

    def _stats(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        return year_stats(data.get("planned", {}), data.get("workouts", []), local_now().date())

    @property
    def native_value(self) -> int:
        return int(self._stats()["completed_count"])

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        data = self.coordinator.data or {}
        today = local_now().date()
        stats = self._stats()
        return {
            "year": stats["year"],
            "total_minutes": stats["total_minutes"],
            "weeks_this_month": weekly_completed_counts(data.get("planned", {}), today.replace(day=1), today),
        }
