"""Constants for Workout Planner integration."""

from __future__ import annotations

from homeassistant.const import Platform

DOMAIN = "workout_planner"

PLATFORMS: list[Platform] = [
    Platform.BUTTON,
    Platform.SENSOR,
    Platform.SELECT,
    Platform.SWITCH,
]

CONF_NAME = "name"
CONF_NOTIFY_SERVICE = "notify_service"

DEFAULT_NAME = "Workout Planner"
DEFAULT_NOTIFY_SERVICE = ""

MAX_ENTRIES_PER_DAY = 3
REMINDER_HORIZON_DAYS = 30
CONFLICT_HORIZON_DAYS = 120

REMINDER_HOURS = {
    "morning": 7,
    "noon": 12,
    "evening": 17,
}
REMINDER_TIME_CHOICES = list(REMINDER_HOURS)
DEFAULT_REMINDER_TIME = "morning"

SIGNAL_PLAN_UPDATED = f"{DOMAIN}_plan_updated"
