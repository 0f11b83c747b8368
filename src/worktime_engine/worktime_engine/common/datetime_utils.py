from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_time_of_day(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) string into time."""
    value = value.strip()
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value, fmt).time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now()


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def iso_week_number(value: date) -> int:
    return value.isocalendar()[1]


def first_day_of_iso_week(year: int, week: int) -> date:
    return date.fromisocalendar(year, week, 1)


def week_bounds(value: date) -> tuple[date, date]:
    """Monday and Sunday of the ISO week containing value."""
    monday = value - timedelta(days=value.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def next_monday(value: date) -> date:
    """The Monday strictly after value (7 days ahead when value is a Monday)."""
    days_ahead = (7 - value.weekday()) % 7 or 7
    return value + timedelta(days=days_ahead)


def round_to_granularity(minutes: int, granularity: int) -> int:
    """Round minutes to granularity buckets, ties to the even bucket."""
    if granularity <= 0:
        return minutes
    return int(round(minutes / granularity)) * granularity
