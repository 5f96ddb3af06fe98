"""Employee request schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class EmployeeRequestCreate(BaseModel):
    """Request body; the employee comes from the session"""

    request_type: str
    request: Any = None


class RequestResult(BaseModel):
    success: bool
    error: Optional[str] = None
    request_id: Optional[str] = None


class EmployeeRequestResponse(BaseModel):
    request_id: str
    employee_id: int
    employee_name: Optional[str] = None
    request_type: str
    request: Any
    status: str
    created_at: Optional[datetime] = None


class AvailabilityResponse(BaseModel):
    id: int
    employee_id: int
    start_time: datetime
    end_time: datetime

    class Config:
        from_attributes = True
