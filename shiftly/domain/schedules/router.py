"""Schedule router - planner week, saving shifts, personal schedule"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_employee, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from ...utils.calendar_utils import get_planner_week, time_options
from .schemas import ShiftResponse, WeekScheduleSave
from .service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["Schedules"])

require_scheduler = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


@router.get("/planner-week")
async def planner_week(
    offset: int = Query(0),
    today: Optional[date] = Query(None),
    _: Employee = Depends(get_current_employee),
):
    """The 7 planner days starting next Monday, plus the selectable times"""
    return {"days": get_planner_week(today, offset), "time_options": time_options()}


@router.get("/me", response_model=list[ShiftResponse])
async def my_schedule(
    employee: Employee = Depends(get_current_employee),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.get_employee_schedule(employee.employee_id)


@router.get("/stores/{store_id}/week")
async def store_week(
    store_id: int,
    week_start: date = Query(...),
    actor: Employee = Depends(require_scheduler),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.check_store_access(actor, store_id)
    return service.get_store_week(store_id, week_start)


@router.post("/stores/{store_id}/week", status_code=201)
async def save_week(
    store_id: int,
    data: WeekScheduleSave,
    actor: Employee = Depends(require_scheduler),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.check_store_access(actor, store_id)
    return service.save_week_schedule(store_id, data.entries)


@router.get("/employees/{employee_id}", response_model=list[ShiftResponse])
async def employee_schedule(
    employee_id: int,
    _: Employee = Depends(require_scheduler),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.get_employee_schedule(employee_id)


@router.delete("/{schedule_id}")
async def delete_shift(
    schedule_id: int,
    actor: Employee = Depends(require_scheduler),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.delete_shift(schedule_id, actor)
    return {"deleted": schedule_id}
