"""Date-range helpers for calendars and the weekly schedule planner"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime]

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _sunday_weekday(value: date) -> int:
    """Day of week with Sunday = 0"""
    return (value.weekday() + 1) % 7


def is_same_day(a: Optional[DateLike], b: Optional[DateLike]) -> bool:
    if a is None or b is None:
        return False
    return _as_date(a) == _as_date(b)


def is_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    """Strictly between start and end, compared by day"""
    return _as_date(start) < _as_date(value) < _as_date(end)


def get_week_range(value: DateLike) -> list[date]:
    """The 7 days of the Sunday-started week containing value"""
    day = _as_date(value)
    start = day - timedelta(days=_sunday_weekday(day))
    return [start + timedelta(days=i) for i in range(7)]


def next_monday(today: DateLike) -> date:
    """First Monday strictly after today (a Monday maps to the following Monday)"""
    day = _as_date(today)
    offset_to_monday = ((8 - _sunday_weekday(day)) % 7) or 7
    return day + timedelta(days=offset_to_monday)


def format_planner_label(day: date) -> str:
    # e.g. "Monday, Jan 6"
    return f"{day.strftime('%A')}, {day.strftime('%b')} {day.day}"


def get_planner_week(today: Optional[DateLike] = None, offset: int = 0) -> list[dict]:
    """
    Week shown by the schedule planner: 7 days starting at the next Monday,
    shifted by offset weeks.

    Returns:
        [{"date_string": "2025-01-06", "label": "Monday, Jan 6"}, ...]
    """
    start = next_monday(today or date.today()) + timedelta(weeks=offset)
    week = []
    for i in range(7):
        day = start + timedelta(days=i)
        week.append({"date_string": day.isoformat(), "label": format_planner_label(day)})
    return week


def time_options(step_minutes: int = 30) -> list[str]:
    """HH:MM slots covering a 24h day"""
    if step_minutes <= 0 or (24 * 60) % step_minutes:
        raise ValueError("step_minutes must evenly divide a day")
    return [
        f"{minutes // 60:02d}:{minutes % 60:02d}" for minutes in range(0, 24 * 60, step_minutes)
    ]
