"""Date key helpers.

Plan overrides are keyed by calendar day (YYYY-MM-DD). Older data was written
with UTC calendar days, so readers compute both the local and the UTC key for
the same instant and try the local one first.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from homeassistant.util import dt as dt_util

DayLike = date | datetime


def as_local_instant(value: DayLike) -> datetime:
    """Return an aware local datetime for value.

    Plain dates are anchored at local noon so the UTC calendar day matches for
    any zone within 12 hours of UTC. Naive datetimes are read as local time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=dt_util.get_default_time_zone())
        return dt_util.as_local(value)
    return dt_util.start_of_local_day(value) + timedelta(hours=12)


def to_local_date_key(value: DayLike) -> str:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return as_local_instant(value).date().isoformat()


def to_utc_date_key(value: DayLike) -> str:
    return dt_util.as_utc(as_local_instant(value)).date().isoformat()


def add_days(value: DayLike, days: int) -> DayLike:
    """Shift by calendar days, keeping the local wall clock for datetimes."""
    if isinstance(value, datetime):
        return as_local_instant(value) + timedelta(days=int(days))
    return value + timedelta(days=int(days))


def next_n_days(start: DayLike, count: int) -> list[DayLike]:
    return [add_days(start, i) for i in range(max(0, int(count)))]


def schedule_weekday(value: DayLike) -> int:
    """Weekday index used by the default schedule (0=Sunday .. 6=Saturday)."""
    local_day = date.fromisoformat(to_local_date_key(value))
    return local_day.isoweekday() % 7


def local_now() -> datetime:
    return dt_util.now()


def today_key(now: datetime | None = None) -> str:
    return to_local_date_key(now or local_now())


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD key; raises ValueError on anything else."""
    raw = str(value or "").strip()[:10]
    return date.fromisoformat(raw)
