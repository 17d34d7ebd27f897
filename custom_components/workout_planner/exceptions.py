"""Errors raised by the planner core."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class PlannerError(HomeAssistantError):
    """Base class for planner failures."""

    code = "planner_error"


class PlanValidationError(PlannerError):
    """Expected, recoverable rejection raised before any write."""

    code = "invalid_plan_change"


class CapacityExceededError(PlanValidationError):
    """Raised when a date already holds the maximum number of workouts."""

    code = "capacity_exceeded"

    def __init__(self, *, date_key: str, limit: int) -> None:
        super().__init__(f"{date_key} already has {limit} workouts")
        self.date_key = date_key
        self.limit = limit


class TargetFullError(PlanValidationError):
    """Raised when a move targets a date that is already full."""

    code = "target_full"

    def __init__(self, *, date_key: str, limit: int) -> None:
        super().__init__(f"Cannot move to {date_key}: it already has {limit} workouts")
        self.date_key = date_key
        self.limit = limit


class PastDateLockedError(PlanValidationError):
    """Raised when rescheduling a date before today."""

    code = "past_date_locked"

    def __init__(self, *, date_key: str, today_key: str) -> None:
        super().__init__(f"{date_key} is in the past (today is {today_key})")
        self.date_key = date_key
        self.today_key = today_key


class StorageIOError(PlannerError):
    """Raised when the underlying store fails to persist."""

    code = "storage_io_error"
