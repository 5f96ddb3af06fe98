"""Schedule service - weekly shift planning per store"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_MANAGER, Employee, Store, StoreSchedule
from ...utils.timezone_utils import (
    get_store_timezone,
    local_day_bounds_utc,
    local_time_to_utc,
    utc_to_local_datetime,
)
from .repository import ScheduleRepository
from .schemas import ShiftEntry

logger = logging.getLogger(__name__)


class ScheduleService:
    """Service layer for store schedules"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()

    def get_store(self, store_id: int) -> Store:
        store = self.repo.get_store(self.db, store_id)
        if not store:
            raise HTTPException(status_code=404, detail="Store not found")
        return store

    @staticmethod
    def check_store_access(actor: Employee, store_id: int) -> None:
        """Managers act on their own store only"""
        if actor.role_id == ROLE_MANAGER and actor.store_id != store_id:
            raise HTTPException(status_code=403, detail="Access Denied")

    def save_week_schedule(self, store_id: int, entries: list[ShiftEntry]) -> dict:
        """
        Insert the checked planner entries as shifts.

        Times are store-local and stored as UTC. An end at or before the start
        is an overnight shift. Days an employee is already scheduled are skipped.
        """
        store = self.get_store(store_id)
        tz = get_store_timezone(store)
        store_employees = self.repo.get_store_employee_ids(self.db, store_id)

        checked = [e for e in entries if e.checked]
        for entry in checked:
            if not entry.start or not entry.end:
                raise HTTPException(
                    status_code=400,
                    detail=f"Missing time for {entry.date.isoformat()} on employee {entry.employee_id}",
                )
            if entry.employee_id not in store_employees:
                raise HTTPException(
                    status_code=400,
                    detail=f"Employee {entry.employee_id} does not belong to store {store_id}",
                )

        if not checked:
            return {"inserted": 0, "skipped": 0}

        first_day = min(e.date for e in checked)
        last_day = max(e.date for e in checked)
        existing = self._existing_days(store_id, tz, first_day, last_day)

        shifts = []
        skipped = 0
        for entry in checked:
            if (entry.employee_id, entry.date) in existing:
                skipped += 1
                continue
            start_time = local_time_to_utc(entry.date, entry.start, tz)
            end_time = local_time_to_utc(entry.date, entry.end, tz)
            if end_time <= start_time:
                end_time = local_time_to_utc(entry.date + timedelta(days=1), entry.end, tz)
            shifts.append(
                {
                    "store_id": store_id,
                    "employee_id": entry.employee_id,
                    "start_time": start_time,
                    "end_time": end_time,
                    "time_log": [],
                }
            )
            existing.add((entry.employee_id, entry.date))

        inserted = self.repo.bulk_insert(self.db, shifts)
        logger.info(f"📅 Saved {inserted} shifts for store {store_id} ({skipped} already scheduled)")
        return {"inserted": inserted, "skipped": skipped}

    def _existing_days(
        self, store_id: int, tz: str, first_day: date, last_day: date
    ) -> set[tuple[int, date]]:
        start, _ = local_day_bounds_utc(first_day.isoformat(), tz)
        _, end = local_day_bounds_utc(last_day.isoformat(), tz)
        return {
            (s.employee_id, utc_to_local_datetime(s.start_time, tz).date())
            for s in self.repo.get_shifts_between(self.db, store_id, start, end)
        }

    def get_store_week(self, store_id: int, week_start: date) -> dict:
        """
        Shifts in the 7 days from week_start, grouped for the planner:
        {employee_id: {"YYYY-MM-DD": {"start": "HH:MM", "end": "HH:MM", "existing": True}}}
        """
        store = self.get_store(store_id)
        tz = get_store_timezone(store)
        start, _ = local_day_bounds_utc(week_start.isoformat(), tz)
        _, end = local_day_bounds_utc((week_start + timedelta(days=6)).isoformat(), tz)

        grouped: dict[int, dict[str, dict]] = {}
        for shift in self.repo.get_shifts_between(self.db, store_id, start, end):
            local_start = utc_to_local_datetime(shift.start_time, tz)
            local_end = utc_to_local_datetime(shift.end_time, tz)
            grouped.setdefault(shift.employee_id, {})[local_start.date().isoformat()] = {
                "schedule_id": shift.schedule_id,
                "start": local_start.strftime("%H:%M"),
                "end": local_end.strftime("%H:%M"),
                "existing": True,
            }
        return grouped

    def get_employee_schedule(self, employee_id: int) -> list[dict]:
        """An employee's shifts, earliest first, with store-local times"""
        shifts = []
        for shift in self.repo.get_employee_shifts(self.db, employee_id):
            tz = get_store_timezone(shift.store)
            shifts.append(self.serialize_shift(shift, tz))
        return shifts

    @staticmethod
    def serialize_shift(shift: StoreSchedule, tz: str) -> dict:
        return {
            "schedule_id": shift.schedule_id,
            "store_id": shift.store_id,
            "employee_id": shift.employee_id,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "local_start": utc_to_local_datetime(shift.start_time, tz).strftime("%Y-%m-%d %H:%M"),
            "local_end": utc_to_local_datetime(shift.end_time, tz).strftime("%Y-%m-%d %H:%M"),
            "time_log": shift.time_log or [],
        }

    def delete_shift(self, schedule_id: int, actor: Optional[Employee] = None) -> None:
        shift = self.repo.get_shift(self.db, schedule_id)
        if not shift:
            raise HTTPException(status_code=404, detail="Shift not found")
        if actor is not None:
            self.check_store_access(actor, shift.store_id)
        self.repo.delete_shift(self.db, shift)
        logger.info(f"🗑️ Shift {schedule_id} deleted")
