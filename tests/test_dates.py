from __future__ import annotations

from datetime import date, datetime

import pytest

from custom_components.workout_planner.dates import (
    add_days,
    next_n_days,
    parse_date_key,
    schedule_weekday,
    to_local_date_key,
    to_utc_date_key,
)

from conftest import BERLIN


def test_plain_dates_use_their_own_calendar_day() -> None:
    assert to_local_date_key(date(2026, 3, 16)) == "2026-03-16"
    assert to_utc_date_key(date(2026, 3, 16)) == "2026-03-16"


def test_utc_key_differs_shortly_after_local_midnight() -> None:
    # 00:30 in Berlin is still the previous day in UTC.
    instant = datetime(2026, 3, 17, 0, 30, tzinfo=BERLIN)
    assert to_local_date_key(instant) == "2026-03-17"
    assert to_utc_date_key(instant) == "2026-03-16"


def test_naive_datetimes_are_read_as_local_time() -> None:
    assert to_local_date_key(datetime(2026, 3, 17, 0, 30)) == "2026-03-17"
    assert to_utc_date_key(datetime(2026, 3, 17, 0, 30)) == "2026-03-16"


def test_schedule_weekday_starts_on_sunday() -> None:
    assert schedule_weekday(date(2026, 3, 15)) == 0  # Sunday
    assert schedule_weekday(date(2026, 3, 16)) == 1  # Monday
    assert schedule_weekday(date(2026, 3, 21)) == 6  # Saturday


def test_add_days_keeps_wall_clock_across_dst() -> None:
    # Berlin switches to summer time on 2026-03-29.
    start = datetime(2026, 3, 28, 7, 0, tzinfo=BERLIN)
    shifted = add_days(start, 2)
    assert to_local_date_key(shifted) == "2026-03-30"
    assert shifted.hour == 7


def test_next_n_days() -> None:
    days = next_n_days(date(2026, 2, 27), 3)
    assert [d.isoformat() for d in days] == ["2026-02-27", "2026-02-28", "2026-03-01"]
    assert next_n_days(date(2026, 2, 27), 0) == []


def test_parse_date_key() -> None:
    assert parse_date_key("2026-03-16") == date(2026, 3, 16)
    assert parse_date_key("2026-03-16T10:00:00") == date(2026, 3, 16)
    with pytest.raises(ValueError):
        parse_date_key("16.03.2026")
