"""
Time zone helpers for store operations.
Shift times are stored in UTC and shown in the store's local zone.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import DEFAULT_STORE_TIMEZONE

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%Y-%m-%d %H:%M"

COMMON_TIMEZONES = [
    {"value": "America/Toronto", "label": "Eastern Time (Toronto)"},
    {"value": "America/New_York", "label": "Eastern Time (New York)"},
    {"value": "America/Chicago", "label": "Central Time (Chicago)"},
    {"value": "America/Denver", "label": "Mountain Time (Denver)"},
    {"value": "America/Phoenix", "label": "Mountain Time - no DST (Phoenix)"},
    {"value": "America/Los_Angeles", "label": "Pacific Time (Los Angeles)"},
    {"value": "America/Vancouver", "label": "Pacific Time (Vancouver)"},
    {"value": "America/Edmonton", "label": "Mountain Time (Edmonton)"},
    {"value": "America/Winnipeg", "label": "Central Time (Winnipeg)"},
    {"value": "America/Halifax", "label": "Atlantic Time (Halifax)"},
    {"value": "America/St_Johns", "label": "Newfoundland Time (St. John's)"},
    {"value": "UTC", "label": "Coordinated Universal Time (UTC)"},
]


def get_zone(tz: Optional[str]) -> Optional[ZoneInfo]:
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def is_valid_timezone(tz: Optional[str]) -> bool:
    return get_zone(tz) is not None


def _parse_iso(value: Union[str, datetime]) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


def local_to_utc(local_iso: Union[str, datetime, None], tz: Optional[str]) -> Optional[str]:
    """
    Interpret a naive local time in tz and return it as a UTC ISO string.
    Returns None for missing or invalid input.
    """
    zone = get_zone(tz)
    if not local_iso or zone is None:
        return None
    parsed = _parse_iso(local_iso)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed.astimezone(timezone.utc).isoformat()


def utc_to_local(
    utc_iso: Union[str, datetime, None], tz: Optional[str], fmt: str = DEFAULT_FORMAT
) -> str:
    """Format a UTC time in tz. Returns '' for missing or invalid input."""
    zone = get_zone(tz)
    if not utc_iso or zone is None:
        return ""
    parsed = _parse_iso(utc_iso)
    if parsed is None:
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(zone).strftime(fmt)


def format_date_time(
    value: Union[str, datetime, None], tz: Optional[str] = None, fmt: str = DEFAULT_FORMAT
) -> str:
    if not value:
        return ""
    parsed = _parse_iso(value)
    if parsed is None:
        return ""
    zone = get_zone(tz)
    if zone is not None:
        parsed = parsed.astimezone(zone) if parsed.tzinfo else parsed.replace(tzinfo=zone)
    return parsed.strftime(fmt)


def get_current_local_time(tz: str, fmt: str = DEFAULT_FORMAT) -> str:
    zone = get_zone(tz) or timezone.utc
    return datetime.now(zone).strftime(fmt)


def get_current_utc_time(fmt: Optional[str] = None) -> str:
    now = datetime.now(timezone.utc)
    return now.strftime(fmt) if fmt else now.isoformat()


def get_timezone_offset(tz: Optional[str], at: Optional[datetime] = None) -> str:
    """Current offset of tz, e.g. 'UTC-5' or 'UTC+5.5'"""
    zone = get_zone(tz)
    if zone is None:
        return ""
    moment = at.astimezone(zone) if at else datetime.now(zone)
    offset_hours = moment.utcoffset().total_seconds() / 3600
    text = f"{offset_hours:g}"
    return f"UTC{'+' if offset_hours >= 0 else ''}{text}"


def local_day_bounds_utc(day: str, tz: Optional[str]) -> tuple[datetime, datetime]:
    """Naive UTC start/end of a local calendar day (YYYY-MM-DD) in tz"""
    zone = get_zone(tz) or timezone.utc
    start_local = datetime.fromisoformat(day).replace(tzinfo=zone)
    end_local = start_local.replace(hour=23, minute=59, second=59, microsecond=999999)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def get_store_timezone(store) -> str:
    """Store's IANA zone, falling back to DEFAULT_STORE_TIMEZONE"""
    tz = getattr(store, "timezone", None) if store is not None else None
    return tz if is_valid_timezone(tz) else DEFAULT_STORE_TIMEZONE


def local_time_to_utc(day: date, hhmm: str, tz: Optional[str]) -> datetime:
    """Naive UTC datetime for a store-local date and HH:MM"""
    zone = get_zone(tz) or timezone.utc
    hour, minute = (int(part) for part in hhmm.split(":")[:2])
    local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def utc_to_local_datetime(value: datetime, tz: Optional[str]) -> datetime:
    """Aware local datetime for a naive UTC datetime"""
    zone = get_zone(tz) or timezone.utc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(zone)
