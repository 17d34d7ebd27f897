"""Plan normalization and schedule resolution.

A stored value for one date can be:
- "" (pause marker: explicitly no training that day)
- a bare workout id (legacy single-entry shorthand)
- a single entry dict {"workout_id", "completed"?, "duration_minutes"?}
- a list of any mix of the above (canonical shape)

An absent key means "use the default weekly schedule"; it is not the same as "".
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from .const import MAX_ENTRIES_PER_DAY
from .dates import DayLike, schedule_weekday, to_local_date_key, to_utc_date_key

_MISSING = object()


def _normalize_one(value: Any) -> dict[str, Any] | None:
    if isinstance(value, str):
        workout_id = value.strip()
        return {"workout_id": workout_id} if workout_id else None
    if not isinstance(value, dict):
        return None

    # Entries exported by the mobile app use camelCase keys.
    raw_id = value.get("workout_id", value.get("workoutId"))
    if not isinstance(raw_id, str) or not raw_id.strip():
        return None
    entry: dict[str, Any] = {"workout_id": raw_id.strip()}

    completed = value.get("completed")
    if isinstance(completed, bool):
        entry["completed"] = completed

    duration = value.get("duration_minutes", value.get("durationMinutes"))
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        entry["duration_minutes"] = duration
    return entry


def normalize_planned_value(value: Any) -> list[dict[str, Any]]:
    """Return the ordered entry list for any stored value. Never raises."""
    if value is None:
        return []
    if isinstance(value, list):
        entries = []
        for item in value:
            entry = _normalize_one(item)
            if entry is not None:
                entries.append(entry)
        return entries
    entry = _normalize_one(value)
    return [entry] if entry is not None else []


def encode_entries(entries: list[dict[str, Any]]) -> str | list[dict[str, Any]]:
    """Value to persist for a date: the entry list, or the pause marker when empty."""
    if not entries:
        return ""
    return [dict(e) for e in entries]


def normalize_schedule_slot(value: Any) -> list[str]:
    """Unique, non-empty workout ids for one weekday, capped per day."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    ids: list[str] = []
    for raw in value:
        if not isinstance(raw, str):
            continue
        workout_id = raw.strip()
        if workout_id and workout_id not in ids:
            ids.append(workout_id)
    return ids[:MAX_ENTRIES_PER_DAY]


def default_ids_for(default_schedule: Mapping[Any, Any], weekday: int) -> list[str]:
    slot = default_schedule.get(str(weekday), default_schedule.get(weekday))
    return normalize_schedule_slot(slot)


def lookup_override(planned: Mapping[str, Any], day: DayLike) -> tuple[str, Any] | None:
    """Find the stored value for day, local key first, then the UTC key."""
    for key in (to_local_date_key(day), to_utc_date_key(day)):
        value = planned.get(key, _MISSING)
        if value is not _MISSING:
            return key, value
    return None


def resolve_entries(
    day: DayLike,
    planned: Mapping[str, Any],
    default_schedule: Mapping[Any, Any],
    known_workout_ids: Collection[str] | None,
    today_key: str,
) -> list[dict[str, Any]]:
    """Effective entries for day: override first, then the weekly default."""
    local_key = to_local_date_key(day)
    is_past = local_key < today_key

    found = lookup_override(planned, day)
    if found is not None:
        entries = normalize_planned_value(found[1])
    elif is_past:
        return []
    else:
        entries = [{"workout_id": wid} for wid in default_ids_for(default_schedule, schedule_weekday(day))]

    # Past days keep dangling ids so history can show "deleted".
    if not is_past and known_workout_ids is not None:
        entries = [e for e in entries if e["workout_id"] in known_workout_ids]
    return entries[:MAX_ENTRIES_PER_DAY]


def first_planned_workout_id(
    day: DayLike,
    planned: Mapping[str, Any],
    default_schedule: Mapping[Any, Any],
) -> str | None:
    """First workout id for day without catalog validation (used for reminders)."""
    found = lookup_override(planned, day)
    if found is not None:
        entries = normalize_planned_value(found[1])
        return entries[0]["workout_id"] if entries else None
    ids = default_ids_for(default_schedule, schedule_weekday(day))
    return ids[0] if ids else None


def describe_day(
    day: DayLike,
    planned: Mapping[str, Any],
    default_schedule: Mapping[Any, Any],
    workout_names: Mapping[str, str],
    today_key: str,
) -> dict[str, Any]:
    """Display payload for one day."""
    date_key = to_local_date_key(day)
    entries = resolve_entries(day, planned, default_schedule, workout_names.keys(), today_key)
    items = []
    for index, entry in enumerate(entries):
        workout_id = entry["workout_id"]
        items.append(
            {
                **entry,
                "index": index,
                "name": workout_names.get(workout_id, ""),
                "deleted": workout_id not in workout_names,
            }
        )
    return {
        "date": date_key,
        "weekday": schedule_weekday(day),
        "is_past": date_key < today_key,
        "is_today": date_key == today_key,
        "is_override": lookup_override(planned, day) is not None,
        "entries": items,
    }


def _blocks_default(value: Any, known_workout_ids: Collection[str]) -> bool:
    if value is None or value == "":
        return True
    entry = _normalize_one(value)
    return entry is not None and entry["workout_id"] not in known_workout_ids


def conflicting_override_changes(
    planned: Mapping[str, Any],
    weekday: int,
    known_workout_ids: Collection[str],
    days: list[DayLike],
) -> tuple[dict[str, Any], list[str]]:
    """Writes and deletes that let a newly enabled weekday default take effect.

    Pause markers and single values pointing at deleted workouts are removed.
    Lists lose their invalid items and are removed once empty.
    """
    writes: dict[str, Any] = {}
    deletes: list[str] = []
    for day in days:
        if schedule_weekday(day) != weekday:
            continue
        for key in (to_local_date_key(day), to_utc_date_key(day)):
            if key not in planned or key in writes or key in deletes:
                continue
            value = planned[key]
            if isinstance(value, list):
                kept = [item for item in value if not _blocks_default(item, known_workout_ids)]
                if not kept:
                    deletes.append(key)
                elif len(kept) != len(value):
                    writes[key] = kept
            elif _blocks_default(value, known_workout_ids):
                deletes.append(key)
    return writes, deletes
