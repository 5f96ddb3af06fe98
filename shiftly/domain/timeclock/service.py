"""Timeclock service - geofenced clock in/out, breaks and timecards"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CLOCK_RADIUS_METERS
from ...models import Employee, Store, StoreSchedule
from ...utils.location import (
    BREAK_END,
    BREAK_START,
    CLOCK_EVENT_TYPES,
    CLOCK_IN,
    CLOCK_OUT,
    calculate_distance,
    calculate_hours,
    format_distance,
    get_current_status,
    parse_timestamp,
    sort_time_logs,
)
from ...utils.timezone_utils import (
    get_store_timezone,
    local_day_bounds_utc,
    local_time_to_utc,
    utc_to_local_datetime,
)

logger = logging.getLogger(__name__)


def _iso_utc(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat() + "Z"


class TimeclockService:
    """Service layer for clock events stored in a shift's time_log"""

    def __init__(self, db: Session):
        self.db = db

    def get_today_shift(self, employee: Employee, now: Optional[datetime] = None) -> Optional[StoreSchedule]:
        """Shift starting on the current UTC date"""
        now = now or datetime.utcnow()
        day_start = datetime(now.year, now.month, now.day)
        return (
            self.db.query(StoreSchedule)
            .filter(
                StoreSchedule.employee_id == employee.employee_id,
                StoreSchedule.start_time >= day_start,
                StoreSchedule.start_time < day_start + timedelta(days=1),
            )
            .order_by(StoreSchedule.start_time)
            .first()
        )

    @staticmethod
    def _check_transition(event_type: str, status: dict) -> None:
        if event_type == CLOCK_IN and status["is_clocked_in"]:
            raise HTTPException(status_code=409, detail="You are already clocked in.")
        if event_type == CLOCK_OUT and not status["is_clocked_in"]:
            raise HTTPException(status_code=409, detail="No active clock in session found.")
        if event_type == BREAK_START:
            if not status["is_clocked_in"]:
                raise HTTPException(status_code=409, detail="You must be clocked in to start a break.")
            if status["is_on_break"]:
                raise HTTPException(status_code=409, detail="You are already on a break.")
        if event_type == BREAK_END and not (status["is_clocked_in"] and status["is_on_break"]):
            raise HTTPException(status_code=409, detail="You are not currently on a break.")

    def record_clock_event(
        self,
        employee: Employee,
        event_type: str,
        latitude: float,
        longitude: float,
        now: Optional[datetime] = None,
    ) -> dict:
        """Append the event to today's shift. Clocking in must happen within the store radius."""
        if event_type not in CLOCK_EVENT_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown clock event: {event_type}")

        now = now or datetime.utcnow()
        shift = self.get_today_shift(employee, now)
        if not shift:
            raise HTTPException(status_code=404, detail="No schedule found for today")

        store = shift.store
        if store is None or store.latitude is None or store.longitude is None:
            raise HTTPException(status_code=409, detail="Store location has not been set up")

        radius = store.clock_radius_meters or CLOCK_RADIUS_METERS
        distance = calculate_distance(latitude, longitude, store.latitude, store.longitude)
        if event_type == CLOCK_IN and distance > radius:
            logger.warning(
                f"📍 Employee {employee.employee_id} is {format_distance(distance)} from store "
                f"{store.store_id}, {event_type} refused"
            )
            raise HTTPException(
                status_code=403,
                detail={
                    "message": (
                        f"You must be within {radius}m of the store to clock in. "
                        f"Current distance: {format_distance(distance)}"
                    ),
                    "distance": round(distance),
                    "allowed_radius": radius,
                },
            )

        logs = list(shift.time_log or [])
        self._check_transition(event_type, get_current_status(logs))

        event = {
            "type": event_type,
            "timestamp": _iso_utc(now),
            "latitude": latitude,
            "longitude": longitude,
            "distance_from_store": round(distance),
        }
        # Reassign so the JSON column is flagged dirty
        shift.time_log = logs + [event]
        self.db.commit()
        self.db.refresh(shift)

        logger.info(f"⏱️ Employee {employee.employee_id} {event_type} on shift {shift.schedule_id}")
        return {
            "schedule_id": shift.schedule_id,
            "event": event,
            "status": get_current_status(shift.time_log),
            "hours": calculate_hours(shift.time_log),
            "distance": format_distance(distance),
        }

    def get_status(self, employee: Employee, now: Optional[datetime] = None) -> dict:
        shift = self.get_today_shift(employee, now)
        if not shift:
            return {
                "schedule_id": None,
                "status": get_current_status([]),
                "hours": calculate_hours([]),
            }
        return {
            "schedule_id": shift.schedule_id,
            "status": get_current_status(shift.time_log),
            "hours": calculate_hours(shift.time_log),
        }

    def _get_store(self, store_id: int) -> Store:
        store = self.db.query(Store).filter(Store.store_id == store_id).first()
        if not store:
            raise HTTPException(status_code=404, detail="Store not found")
        return store

    def get_store_timecards(self, store_id: int, day: date) -> dict:
        """
        Each store employee's events on a store-local day:
        {employee_id: {"name", "events": {type: "HH:MM"}, "hours"}}
        """
        store = self._get_store(store_id)
        tz = get_store_timezone(store)
        day_start, day_end = local_day_bounds_utc(day.isoformat(), tz)

        employees = self.db.query(Employee).filter(Employee.store_id == store_id).all()
        cards = {
            e.employee_id: {"name": e.full_name, "events": {}, "hours": calculate_hours([])}
            for e in employees
        }

        shifts = (
            self.db.query(StoreSchedule)
            .filter(
                StoreSchedule.store_id == store_id,
                StoreSchedule.start_time >= day_start - timedelta(days=1),
                StoreSchedule.start_time <= day_end,
            )
            .all()
        )
        for shift in shifts:
            day_logs = [
                log
                for log in sort_time_logs(shift.time_log)
                if day_start <= parse_timestamp(log["timestamp"]) <= day_end
            ]
            if not day_logs:
                continue
            card = cards.setdefault(
                shift.employee_id, {"name": "", "events": {}, "hours": calculate_hours([])}
            )
            for log in day_logs:
                card["events"][log["type"]] = utc_to_local_datetime(
                    parse_timestamp(log["timestamp"]), tz
                ).strftime("%H:%M")
            card["hours"] = calculate_hours(day_logs)
        return cards

    def update_time_log_entry(
        self, store_id: int, employee_id: int, day: date, event_type: str, local_time: str
    ) -> dict:
        """Manager correction: set an event on a store-local day to local HH:MM"""
        if event_type not in CLOCK_EVENT_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown clock event: {event_type}")

        store = self._get_store(store_id)
        tz = get_store_timezone(store)
        day_start, day_end = local_day_bounds_utc(day.isoformat(), tz)

        shift = (
            self.db.query(StoreSchedule)
            .filter(
                StoreSchedule.store_id == store_id,
                StoreSchedule.employee_id == employee_id,
                StoreSchedule.start_time >= day_start,
                StoreSchedule.start_time <= day_end,
            )
            .order_by(StoreSchedule.start_time)
            .first()
        )
        if not shift:
            raise HTTPException(status_code=404, detail="No schedule found for that day")

        timestamp = _iso_utc(local_time_to_utc(day, local_time, tz))
        logs = list(shift.time_log or [])
        for i, log in enumerate(logs):
            if log["type"] == event_type and day_start <= parse_timestamp(log["timestamp"]) <= day_end:
                logs[i] = {**log, "timestamp": timestamp}
                break
        else:
            logs.append(
                {
                    "type": event_type,
                    "timestamp": timestamp,
                    "latitude": 0,
                    "longitude": 0,
                    "distance_from_store": 0,
                }
            )

        shift.time_log = logs
        self.db.commit()
        self.db.refresh(shift)
        logger.info(f"✏️ Shift {shift.schedule_id} {event_type} set to {local_time} ({tz})")
        return {"schedule_id": shift.schedule_id, "time_log": sort_time_logs(shift.time_log)}
