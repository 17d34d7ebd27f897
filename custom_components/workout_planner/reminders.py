"""Training reminders.

Reminders are derived from the plan and rebuilt from scratch on every change:
cancel everything, then schedule at most one notification per day for the
next days that have a planned workout.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from homeassistant.components import persistent_notification
from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_track_point_in_time
from homeassistant.util import dt as dt_util

from .const import DOMAIN, REMINDER_HORIZON_DAYS, REMINDER_HOURS
from .dates import local_now, to_local_date_key
from .schedule import first_planned_workout_id
from .storage import WorkoutPlannerStore, workout_names

_LOGGER = logging.getLogger(__name__)

REMINDER_TITLE = "Training time!"


def reminder_body(workout_name: str | None) -> str:
    if workout_name:
        return f"Today's workout: {workout_name}. Time to get started!"
    return "A training is planned for today. Time to get started!"


class HassNotificationScheduler:
    """Schedules reminders inside Home Assistant.

    Delivery goes through `notify.<notify_service>` when configured, otherwise
    through a persistent notification.
    """

    def __init__(self, hass: HomeAssistant, *, notify_service: str = "") -> None:
        self.hass = hass
        self.notify_service = str(notify_service or "").strip().removeprefix("notify.")
        self._unsubs: list[CALLBACK_TYPE] = []
        self.scheduled: list[dict[str, Any]] = []

    async def async_has_permission(self) -> bool:
        if not self.notify_service:
            return True
        return self.hass.services.has_service("notify", self.notify_service)

    async def async_request_permission(self) -> bool:
        # Nothing to prompt for; the notify service either exists or it does not.
        return await self.async_has_permission()

    async def async_cancel_all(self) -> None:
        while self._unsubs:
            self._unsubs.pop()()
        self.scheduled = []

    async def async_schedule_at(self, when: datetime, title: str, body: str) -> None:
        async def _fire(_now: datetime) -> None:
            await self._async_send(title, body)

        self._unsubs.append(async_track_point_in_time(self.hass, _fire, when))
        self.scheduled.append({"at": when.isoformat(), "title": title, "body": body})

    async def _async_send(self, title: str, body: str) -> None:
        if self.notify_service:
            await self.hass.services.async_call(
                "notify",
                self.notify_service,
                {"title": title, "message": body},
                blocking=True,
            )
            return
        persistent_notification.async_create(
            self.hass,
            body,
            title=title,
            notification_id=f"{DOMAIN}_reminder",
        )


class ReminderSynchronizer:
    """Keeps scheduled reminders in line with the plan."""

    def __init__(
        self,
        store: WorkoutPlannerStore,
        scheduler: Any,
        *,
        now: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self._now = now
        self.last_result: dict[str, Any] = {}

    async def async_resync(self, horizon_days: int = REMINDER_HORIZON_DAYS) -> bool:
        """Rebuild all reminders; returns True if at least one was scheduled."""
        state = await self.store.async_load()
        settings = state["settings"]
        now = dt_util.as_local(self._now())

        if not settings.get("reminder_enabled"):
            await self.scheduler.async_cancel_all()
            self._record(now, 0, "disabled")
            return False

        if not await self.scheduler.async_has_permission():
            if not await self.scheduler.async_request_permission():
                _LOGGER.warning("Training reminders enabled but notifications are not available")
                await self.scheduler.async_cancel_all()
                self._record(now, 0, "no_permission")
                return False

        await self.scheduler.async_cancel_all()

        hour = REMINDER_HOURS.get(str(settings.get("reminder_time_of_day")), REMINDER_HOURS["morning"])
        names = workout_names(state)
        start = dt_util.start_of_local_day(now)
        scheduled = 0
        for i in range(max(0, int(horizon_days))):
            day = dt_util.start_of_local_day(start.date() + timedelta(days=i))
            trigger = day.replace(hour=hour)
            workout_id = first_planned_workout_id(trigger.date(), state["planned"], state["default_schedule"])
            if not workout_id:
                continue
            if trigger <= now:
                continue
            try:
                await self.scheduler.async_schedule_at(trigger, REMINDER_TITLE, reminder_body(names.get(workout_id)))
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Failed to schedule reminder for %s", to_local_date_key(day))
                continue
            scheduled += 1

        _LOGGER.debug("Scheduled %s training reminders", scheduled)
        self._record(now, scheduled, "ok")
        return scheduled > 0

    def _record(self, now: datetime, scheduled: int, status: str) -> None:
        self.last_result = {"at": now.isoformat(), "status": status, "scheduled": scheduled}
