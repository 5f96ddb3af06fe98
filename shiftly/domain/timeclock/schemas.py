"""Timeclock schemas"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_of_day
from ...utils.location import CLOCK_EVENT_TYPES


class ClockEventCreate(BaseModel):
    type: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in CLOCK_EVENT_TYPES:
            raise ValueError(f"type must be one of {', '.join(CLOCK_EVENT_TYPES)}")
        return v


class TimeLogCorrection(BaseModel):
    employee_id: int
    date: date
    type: str
    time: str

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in CLOCK_EVENT_TYPES:
            raise ValueError(f"type must be one of {', '.join(CLOCK_EVENT_TYPES)}")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)
