"""Schedule schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_time_of_day


class ShiftEntry(BaseModel):
    """One planner cell: an employee working on a date, times in store-local HH:MM"""

    employee_id: int
    date: date
    start: Optional[str] = None
    end: Optional[str] = None
    checked: bool = True

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v):
        if v:
            return validate_time_of_day(v)
        return v or None


class WeekScheduleSave(BaseModel):
    entries: list[ShiftEntry]


class ShiftResponse(BaseModel):
    schedule_id: int
    store_id: int
    employee_id: int
    start_time: datetime
    end_time: datetime
    local_start: Optional[str] = None
    local_end: Optional[str] = None
    time_log: Optional[list] = None
