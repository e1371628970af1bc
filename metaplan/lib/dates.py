"""
Calendar keys used by tasks and goals.

- Day key: ISO ``YYYY-MM-DD`` (tasks, weekly goal identifiers).
- Week key: the ISO date of that week's Monday.
- Month key: ``YYYY.MM``.
- Year key: ``YYYY``.

All functions are pure; "today" is always the local date.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^\d{4}\.(0[1-9]|1[0-2])$")
_YEAR_RE = re.compile(r"^\d{4}$")


def today_str() -> str:
    """Return today's local date as ``YYYY-MM-DD``."""
    return date.today().isoformat()


def parse_day(day: str) -> date:
    """Parse a ``YYYY-MM-DD`` day key.

    Raises:
        ValueError: If the string is not a valid ISO date.
    """
    if not _DAY_RE.match(day):
        raise ValueError(f"Not a day key: {day!r}")
    return date.fromisoformat(day)


def monday_of(day: str) -> str:
    """Return the Monday of the week containing ``day``.

    Sunday belongs to the week that started six days earlier.

    Example:
        >>> monday_of("2024-01-07")
        '2024-01-01'
    """
    d = parse_day(day)
    return (d - timedelta(days=d.weekday())).isoformat()


def week_id(day: str) -> str:
    return monday_of(day)


def month_id(year: int, month: int) -> str:
    return f"{year:04d}.{month:02d}"


def year_id(year: int) -> str:
    return f"{year:04d}"


def shift_day(day: str, days: int) -> str:
    return (parse_day(day) + timedelta(days=days)).isoformat()


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Move a (year, month) pair by ``months``, rolling over year edges."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def date_info(now: datetime | None = None) -> dict[str, str]:
    """Bookkeeping fields written next to every persisted document.

    The month is unpadded and the weekday is an English name; these
    fields are for humans browsing the store and are never read back.
    """
    now = now or datetime.now()
    day = now.date().isoformat()
    return {
        "date": day,
        "year": str(now.year),
        "month": str(now.month),
        "day": WEEKDAY_NAMES[now.weekday()],
        "week": monday_of(day),
    }


def identifier_matches(goal_type: str, identifier: str) -> bool:
    """Return True if ``identifier`` is a valid bucket key for ``goal_type``."""
    if goal_type == "weekly":
        try:
            return monday_of(identifier) == identifier
        except ValueError:
            return False
    if goal_type == "monthly":
        return bool(_MONTH_RE.match(identifier))
    if goal_type == "yearly":
        return bool(_YEAR_RE.match(identifier))
    return False
