"""Training statistics derived from the logged plan history."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any

from .schedule import lookup_override, normalize_planned_value


def _completed_entries(planned: Mapping[str, Any], day: date) -> list[dict[str, Any]]:
    found = lookup_override(planned, day)
    if found is None:
        return []
    return [e for e in normalize_planned_value(found[1]) if e.get("completed")]


def year_stats(planned: Mapping[str, Any], workouts: list[dict[str, Any]], today: date) -> dict[str, Any]:
    """Completed trainings and minutes from January 1st through today.

    A workout completed twice on one day counts once. Minutes come from the
    logged duration, else from the workout's own estimate.
    """
    estimates = {
        str(w.get("id") or ""): w.get("duration_minutes")
        for w in workouts
        if isinstance(w, dict) and isinstance(w.get("duration_minutes"), (int, float))
    }
    completed_count = 0
    total_minutes: float = 0
    day = date(today.year, 1, 1)
    while day <= today:
        entries = _completed_entries(planned, day)
        completed_count += len({e["workout_id"] for e in entries})
        for entry in entries:
            duration = entry.get("duration_minutes")
            if isinstance(duration, (int, float)) and duration > 0:
                total_minutes += duration
            elif estimates.get(entry["workout_id"]):
                total_minutes += estimates[entry["workout_id"]]
        day += timedelta(days=1)
    return {"year": today.year, "completed_count": completed_count, "total_minutes": total_minutes}


def weekly_completed_counts(planned: Mapping[str, Any], month_start: date, today: date) -> list[dict[str, int]]:
    """Completed trainings per ISO week for one month, up to today."""
    month_start = month_start.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)
    weeks: dict[tuple[int, int], int] = {}
    day = month_start
    while day < next_month and day <= today:
        iso = day.isocalendar()
        key = (iso.year, iso.week)
        weeks.setdefault(key, 0)
        weeks[key] += len({e["workout_id"] for e in _completed_entries(planned, day)})
        day += timedelta(days=1)
    return [{"year": year, "week": week, "count": count} for (year, week), count in weeks.items()]
