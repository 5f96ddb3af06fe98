"""Geofence and time-log arithmetic for clock in/out"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

EARTH_RADIUS_METERS = 6371e3

CLOCK_IN = "clock_in"
CLOCK_OUT = "clock_out"
BREAK_START = "break_start"
BREAK_END = "break_end"
CLOCK_EVENT_TYPES = (CLOCK_IN, CLOCK_OUT, BREAK_START, BREAK_END)


def _js_round(value: float) -> int:
    # Half rounds up, not to even
    return int(math.floor(value + 0.5))


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_within_radius(user_location: dict, store_location: dict, allowed_radius: float) -> bool:
    distance = calculate_distance(
        user_location["latitude"],
        user_location["longitude"],
        store_location["latitude"],
        store_location["longitude"],
    )
    return distance <= allowed_radius


def format_distance(distance: float) -> str:
    if distance < 1000:
        return f"{_js_round(distance)}m"
    return f"{distance / 1000:.1f}km"


def format_duration(hours: float) -> str:
    """8.5 -> '8h 30m', 0.75 -> '45m', 0 -> '0m'"""
    if hours == 0:
        return "0m"
    h = math.floor(hours)
    m = _js_round((hours - h) * 60)
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Compare everything as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_time_logs(time_logs: Optional[list]) -> list[dict]:
    if not isinstance(time_logs, list):
        return []
    return sorted(time_logs, key=lambda log: parse_timestamp(log["timestamp"]))


def _has_open(logs: list[dict], opener: str, closer: str) -> bool:
    """An opener event with no closer after it"""
    for log in logs:
        if log["type"] != opener:
            continue
        opened_at = parse_timestamp(log["timestamp"])
        closed = any(
            other["type"] == closer and parse_timestamp(other["timestamp"]) > opened_at
            for other in logs
        )
        if not closed:
            return True
    return False


def get_current_status(time_logs: Optional[list]) -> dict:
    logs = sort_time_logs(time_logs)
    if not logs:
        return {
            "status": "clocked_out",
            "last_event": None,
            "is_clocked_in": False,
            "is_on_break": False,
        }

    is_clocked_in = _has_open(logs, CLOCK_IN, CLOCK_OUT)
    is_on_break = _has_open(logs, BREAK_START, BREAK_END)

    status = "clocked_out"
    if is_clocked_in:
        status = "on_break" if is_on_break else "clocked_in"

    return {
        "status": status,
        "last_event": logs[-1],
        "is_clocked_in": is_clocked_in,
        "is_on_break": is_on_break,
    }


def calculate_hours(time_logs: Optional[list]) -> dict:
    """Total, break and work hours (2 decimals) from a shift's time log"""
    logs = sort_time_logs(time_logs)
    if not logs:
        return {"total_hours": 0, "break_time": 0, "work_time": 0}

    clock_in_time = None
    clock_out_time = None
    current_break_start = None
    total_break = 0.0

    for log in logs:
        at = parse_timestamp(log["timestamp"])
        if log["type"] == CLOCK_IN:
            clock_in_time = at
        elif log["type"] == CLOCK_OUT:
            clock_out_time = at
        elif log["type"] == BREAK_START:
            current_break_start = at
        elif log["type"] == BREAK_END and current_break_start:
            total_break += (at - current_break_start).total_seconds() / 3600
            current_break_start = None

    total_hours = 0.0
    work_time = 0.0
    if clock_in_time and clock_out_time:
        total_hours = (clock_out_time - clock_in_time).total_seconds() / 3600
        work_time = max(0.0, total_hours - total_break)

    return {
        "total_hours": round(total_hours, 2),
        "break_time": round(total_break, 2),
        "work_time": round(work_time, 2),
    }
