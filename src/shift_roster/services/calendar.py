from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def day_of_week(day: date) -> int:
    """Weekday index with Sunday as 0, matching recurring assignment rows."""
    return (day.weekday() + 1) % 7


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def parse_time(value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
