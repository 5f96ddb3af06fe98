from datetime import date, datetime

import pytest

from shiftly.utils.calendar_utils import (
    format_planner_label,
    get_planner_week,
    get_week_range,
    is_in_range,
    is_same_day,
    next_monday,
    time_options,
)


def test_is_same_day_ignores_time():
    assert is_same_day(datetime(2025, 1, 6, 8), datetime(2025, 1, 6, 23, 59))
    assert not is_same_day(date(2025, 1, 6), date(2025, 1, 7))
    assert not is_same_day(None, date(2025, 1, 6))


def test_is_in_range_is_exclusive():
    start, end = date(2025, 1, 6), date(2025, 1, 10)
    assert is_in_range(date(2025, 1, 8), start, end)
    assert not is_in_range(start, start, end)
    assert not is_in_range(end, start, end)


def test_week_range_starts_on_sunday():
    week = get_week_range(date(2025, 1, 8))  # Wednesday
    assert week[0] == date(2025, 1, 5)
    assert week[-1] == date(2025, 1, 11)
    assert len(week) == 7
    assert get_week_range(date(2025, 1, 5))[0] == date(2025, 1, 5)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 1, 5), date(2025, 1, 6)),  # Sunday
        (date(2025, 1, 6), date(2025, 1, 13)),  # Monday goes to the following week
        (date(2025, 1, 8), date(2025, 1, 13)),
        (date(2025, 1, 11), date(2025, 1, 13)),  # Saturday
    ],
)
def test_next_monday(today, expected):
    assert next_monday(today) == expected


def test_planner_week_labels():
    week = get_planner_week(date(2025, 1, 1))
    assert week[0] == {"date_string": "2025-01-06", "label": "Monday, Jan 6"}
    assert week[-1] == {"date_string": "2025-01-12", "label": "Sunday, Jan 12"}


def test_planner_week_offset():
    assert get_planner_week(date(2025, 1, 1), offset=1)[0]["date_string"] == "2025-01-13"
    assert get_planner_week(date(2025, 1, 1), offset=-1)[0]["date_string"] == "2024-12-30"


def test_format_planner_label():
    assert format_planner_label(date(2025, 3, 14)) == "Friday, Mar 14"


def test_time_options():
    options = time_options()
    assert len(options) == 48
    assert options[:3] == ["00:00", "00:30", "01:00"]
    assert options[-1] == "23:30"
    assert len(time_options(15)) == 96
    with pytest.raises(ValueError):
        time_options(7)
