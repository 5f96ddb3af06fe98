"""Employee schemas"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class EmployeeResponse(BaseModel):
    employee_id: int
    id: Optional[str] = None
    email: str
    store_id: Optional[int] = None
    store_name: Optional[str] = None
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_name: Optional[str] = None
    full_name: str = ""
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    salary: Optional[Decimal] = None
    profile_photo_url: str = ""
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeUpdate(BaseModel):
    """Partial update - only fields present in the body are written"""

    store_id: Optional[int] = None
    role_id: Optional[int] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    salary: Optional[Decimal] = Field(None, ge=0)
    profile_photo_path: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name cannot be blank")
        return v.strip() if v else v


class ActivityResponse(BaseModel):
    id: int
    type: str
    description: Optional[str] = None
    employee_id: Optional[int] = None
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardMetrics(BaseModel):
    role_id: Optional[int] = None
    employee_count: Optional[int] = None
    total_payroll: Optional[float] = None
    teams_count: Optional[int] = None
    team_size: Optional[int] = None
    pending_requests: Optional[int] = None
    pending_time_off: int = 0
    recent_activities: list[ActivityResponse] = []
