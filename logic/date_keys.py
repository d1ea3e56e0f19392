"""Canonical ``YYYY-MM-DD`` date keys.

Plans and wear-log groupings are keyed by the *local* calendar day. Keys are
built from the value's own year/month/day fields and never go through UTC, so
an evening timestamp cannot slip into the next day. Because keys are
zero-padded and fixed-width, comparing two keys as strings compares the days.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Date-only events are stamped at midday so rendering them back to a key stays
# on the same day across DST shifts.
WORN_TIME_OF_DAY = time(12, 0)


def to_date_key(value: date | datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def today_key(now: datetime | None = None) -> str:
    return to_date_key(now or datetime.now())


def parse_date_key(key: str) -> date:
    """Parse a key back to a date, rejecting anything not in canonical form."""

    if not isinstance(key, str) or not _DATE_KEY.match(key):
        raise ValueError(f"Date key must look like YYYY-MM-DD, got {key!r}")
    return date.fromisoformat(key)


def worn_at_noon(key: str) -> datetime:
    return datetime.combine(parse_date_key(key), WORN_TIME_OF_DAY)


def shift_date_key(key: str, days: int) -> str:
    return to_date_key(parse_date_key(key) + timedelta(days=days))


def is_past(key: str, today: str) -> bool:
    return key < today


__all__ = [
    "WORN_TIME_OF_DAY",
    "to_date_key",
    "today_key",
    "parse_date_key",
    "worn_at_noon",
    "shift_date_key",
    "is_past",
]
