"""Plan mutations.

Every operation resolves the date's effective entries first (override, else the
weekly default), edits that list and writes it back under the local date key.
Editing a day that only had default entries therefore creates its first
explicit override ("materialization") and leaves the weekly default untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from .const import CONFLICT_HORIZON_DAYS, MAX_ENTRIES_PER_DAY
from .dates import DayLike, local_now, next_n_days, parse_date_key, to_local_date_key
from .exceptions import CapacityExceededError, PastDateLockedError, TargetFullError
from .schedule import conflicting_override_changes, describe_day, encode_entries, resolve_entries
from .storage import WorkoutPlannerStore, known_workout_ids, workout_names

_LOGGER = logging.getLogger(__name__)

_PATCH_KEYS = ("completed", "duration_minutes")


def ensure_editable(day: DayLike, today_key: str) -> None:
    """Reject reschedule-type edits on days before today."""
    date_key = to_local_date_key(day)
    if date_key < today_key:
        raise PastDateLockedError(date_key=date_key, today_key=today_key)


def _apply_patch(entry: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    updated = dict(entry)
    for key in _PATCH_KEYS:
        if key not in patch:
            continue
        value = patch[key]
        if value is None:
            updated.pop(key, None)
        elif key == "completed":
            updated[key] = bool(value)
        else:
            updated[key] = value
    return updated


class WorkoutPlanner:
    """Read-resolve-write operations on the plan."""

    def __init__(
        self,
        store: WorkoutPlannerStore,
        *,
        on_change: Callable[[], Awaitable[None]] | None = None,
        now: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self._on_change = on_change
        self._now = now

    def today_key(self) -> str:
        return to_local_date_key(self._now())

    async def _async_resolve(self, day: DayLike) -> list[dict[str, Any]]:
        state = await self.store.async_load()
        return resolve_entries(
            day,
            state["planned"],
            state["default_schedule"],
            known_workout_ids(state),
            self.today_key(),
        )

    async def _async_write(self, day: DayLike, entries: list[dict[str, Any]]) -> None:
        await self.store.async_save_planned_workout(to_local_date_key(day), encode_entries(entries))

    async def _async_changed(self) -> None:
        if self._on_change is not None:
            await self._on_change()

    async def async_entries_for(self, day: DayLike) -> list[dict[str, Any]]:
        return await self._async_resolve(day)

    async def async_days(self, start: DayLike, count: int) -> list[dict[str, Any]]:
        state = await self.store.async_load()
        names = workout_names(state)
        today = self.today_key()
        return [
            describe_day(day, state["planned"], state["default_schedule"], names, today)
            for day in next_n_days(start, count)
        ]

    async def async_add(self, day: DayLike, workout_id: str) -> list[dict[str, Any]]:
        return await self._async_append(day, {"workout_id": str(workout_id)})

    async def async_add_with_details(
        self,
        day: DayLike,
        workout_id: str,
        *,
        completed: bool,
        duration_minutes: int | float | None = None,
    ) -> list[dict[str, Any]]:
        """Add a fully described entry, e.g. a training logged after the fact."""
        entry: dict[str, Any] = {"workout_id": str(workout_id), "completed": bool(completed)}
        if duration_minutes is not None:
            entry["duration_minutes"] = duration_minutes
        return await self._async_append(day, entry)

    async def _async_append(self, day: DayLike, entry: dict[str, Any]) -> list[dict[str, Any]]:
        entries = await self._async_resolve(day)
        if len(entries) >= MAX_ENTRIES_PER_DAY:
            raise CapacityExceededError(date_key=to_local_date_key(day), limit=MAX_ENTRIES_PER_DAY)
        entries = [*entries, entry]
        await self._async_write(day, entries)
        _LOGGER.debug("Added %s to %s", entry["workout_id"], to_local_date_key(day))
        await self._async_changed()
        return entries

    async def async_remove_at(self, day: DayLike, index: int) -> list[dict[str, Any]]:
        entries = await self._async_resolve(day)
        if not 0 <= int(index) < len(entries):
            return entries
        entries = [e for i, e in enumerate(entries) if i != int(index)]
        await self._async_write(day, entries)
        _LOGGER.debug("Removed entry %s from %s", index, to_local_date_key(day))
        await self._async_changed()
        return entries

    async def async_update_at(self, day: DayLike, index: int, patch: dict[str, Any]) -> list[dict[str, Any]]:
        """Merge completion details into one entry, in place."""
        entries = await self._async_resolve(day)
        if not 0 <= int(index) < len(entries):
            return entries
        entries = [_apply_patch(e, patch) if i == int(index) else e for i, e in enumerate(entries)]
        await self._async_write(day, entries)
        await self._async_changed()
        return entries

    async def async_move(self, from_day: DayLike, to_day: DayLike, workout_id: str) -> bool:
        """Move the first matching entry; returns False when nothing matched.

        The source and target are written one after the other. A full target,
        including the source day itself, is rejected before any write.
        """
        source = await self._async_resolve(from_day)
        index = next((i for i, e in enumerate(source) if e["workout_id"] == str(workout_id)), None)
        if index is None:
            return False
        moved = source[index]
        remaining = [e for i, e in enumerate(source) if i != index]

        same_day = to_local_date_key(from_day) == to_local_date_key(to_day)
        target = source if same_day else await self._async_resolve(to_day)
        if len(target) >= MAX_ENTRIES_PER_DAY:
            raise TargetFullError(date_key=to_local_date_key(to_day), limit=MAX_ENTRIES_PER_DAY)

        if same_day:
            await self._async_write(from_day, [*remaining, moved])
            await self._async_changed()
            return True

        await self._async_write(from_day, remaining)
        await self._async_write(to_day, [*target, moved])
        _LOGGER.debug(
            "Moved %s from %s to %s", workout_id, to_local_date_key(from_day), to_local_date_key(to_day)
        )
        await self._async_changed()
        return True

    async def async_set_default_schedule_day(self, weekday: int, workout_ids: list[str]) -> list[str]:
        """Set one weekday of the recurring schedule.

        When the weekday gets workouts, upcoming overrides that would hide them
        (pause markers, deleted workouts) are cleared.
        """
        state = await self.store.async_set_default_schedule_day(weekday, workout_ids)
        ids = state["default_schedule"][str(int(weekday))]
        if ids:
            writes, deletes = conflicting_override_changes(
                state["planned"],
                int(weekday),
                known_workout_ids(state),
                next_n_days(parse_date_key(self.today_key()), CONFLICT_HORIZON_DAYS),
            )
            if writes or deletes:
                _LOGGER.debug(
                    "Clearing %s conflicting overrides for weekday %s", len(writes) + len(deletes), weekday
                )
                await self.store.async_apply_planned_changes(writes=writes, deletes=deletes)
        await self._async_changed()
        return ids
