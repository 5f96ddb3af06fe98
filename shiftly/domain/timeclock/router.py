"""Timeclock router - clock events for employees, timecards for managers"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_employee, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from ..schedules.service import ScheduleService
from .schemas import ClockEventCreate, TimeLogCorrection
from .service import TimeclockService

router = APIRouter(prefix="/timeclock", tags=["Timeclock"])

require_timecard_editor = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


def get_timeclock_service(db: Session = Depends(get_db)) -> TimeclockService:
    """Dependency injection for TimeclockService"""
    return TimeclockService(db)


@router.get("/status")
async def clock_status(
    employee: Employee = Depends(get_current_employee),
    service: TimeclockService = Depends(get_timeclock_service),
):
    return service.get_status(employee)


@router.post("/events")
async def clock_event(
    data: ClockEventCreate,
    employee: Employee = Depends(get_current_employee),
    service: TimeclockService = Depends(get_timeclock_service),
):
    return service.record_clock_event(employee, data.type, data.latitude, data.longitude)


@router.get("/stores/{store_id}/timecards")
async def store_timecards(
    store_id: int,
    day: date = Query(..., alias="date"),
    actor: Employee = Depends(require_timecard_editor),
    service: TimeclockService = Depends(get_timeclock_service),
):
    ScheduleService.check_store_access(actor, store_id)
    return service.get_store_timecards(store_id, day)


@router.put("/stores/{store_id}/timecards")
async def correct_timecard(
    store_id: int,
    data: TimeLogCorrection,
    actor: Employee = Depends(require_timecard_editor),
    service: TimeclockService = Depends(get_timeclock_service),
):
    ScheduleService.check_store_access(actor, store_id)
    return service.update_time_log_entry(store_id, data.employee_id, data.date, data.type, data.time)
