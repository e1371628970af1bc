"""
Tests for calendar keys (metaplan/lib/dates.py).
"""

from __future__ import annotations

from datetime import datetime

import pytest

from metaplan.lib.dates import (
    date_info,
    identifier_matches,
    month_id,
    monday_of,
    parse_day,
    shift_day,
    shift_month,
    year_id,
)


@pytest.mark.parametrize(
    ("day", "monday"),
    [
        ("2024-01-01", "2024-01-01"),  # Monday
        ("2024-01-05", "2024-01-01"),  # Friday
        ("2024-01-07", "2024-01-01"),  # Sunday belongs to the week before
        ("2024-01-08", "2024-01-08"),
        ("2024-03-02", "2024-02-26"),  # crosses a month edge
    ],
)
def test_monday_of(day, monday):
    assert monday_of(day) == monday


@pytest.mark.parametrize("bad", ["2024-1-5", "20240105", "2024-02-30", ""])
def test_parse_day_rejects_bad_keys(bad):
    with pytest.raises(ValueError):
        parse_day(bad)


def test_month_and_year_ids_are_padded():
    assert month_id(2024, 3) == "2024.03"
    assert month_id(2024, 12) == "2024.12"
    assert year_id(987) == "0987"


def test_shift_day_crosses_year():
    assert shift_day("2023-12-31", 1) == "2024-01-01"
    assert shift_day("2024-03-01", -1) == "2024-02-29"


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [((2024, 1), -1, (2023, 12)), ((2024, 12), 1, (2025, 1)), ((2024, 5), 0, (2024, 5)), ((2024, 2), 23, (2026, 1))],
)
def test_shift_month(start, months, expected):
    assert shift_month(*start, months) == expected


def test_date_info_fields():
    info = date_info(datetime(2024, 3, 7, 15, 30))
    assert info == {
        "date": "2024-03-07",
        "year": "2024",
        "month": "3",
        "day": "Thursday",
        "week": "2024-03-04",
    }


@pytest.mark.parametrize(
    ("goal_type", "identifier", "ok"),
    [
        ("weekly", "2024-01-01", True),
        ("weekly", "2024-01-02", False),
        ("weekly", "2024.01", False),
        ("monthly", "2024.01", True),
        ("monthly", "2024.00", False),
        ("yearly", "2024", True),
        ("yearly", "2024.01", False),
        ("daily", "2024-01-01", False),
    ],
)
def test_identifier_matches(goal_type, identifier, ok):
    assert identifier_matches(goal_type, identifier) is ok
