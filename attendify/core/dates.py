"""
Calendar-date keys.

Attendance is keyed by a zero-padded ``YYYY-MM-DD`` string so that range
queries can compare dates as plain strings.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timezone

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def date_key(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def today_key(now: datetime | None = None) -> str:
    """UTC calendar date of *now* as a date key."""
    now = now or utc_now()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d")


def parse_date_key(value: str) -> str:
    """Validate a canonical date key, returning it unchanged.

    Raises ``ValueError`` for anything that is not a real, zero-padded
    calendar date.
    """
    value = value.strip()
    if not _DATE_KEY_RE.match(value):
        raise ValueError("Date must use the YYYY-MM-DD format")
    date.fromisoformat(value)
    return value


def days_in_month(year: int, month: int) -> int:
    _, last_day = calendar.monthrange(year, month)
    return last_day


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last date keys of a month, both inclusive."""
    return date_key(year, month, 1), date_key(year, month, days_in_month(year, month))


def month_day_keys(year: int, month: int) -> list[str]:
    return [date_key(year, month, day) for day in range(1, days_in_month(year, month) + 1)]
