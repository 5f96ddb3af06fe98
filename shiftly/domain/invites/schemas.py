"""Invite and account setup schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from ...shared.validators import validate_email


class InviteCreate(BaseModel):
    """Manager/owner invites a new employee"""

    email: EmailStr
    store_id: int
    role_id: int
    employee_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return validate_email(v)


class InviteResponse(BaseModel):
    token: str
    email: str
    store_id: int
    role_id: int
    employee_id: Optional[int] = None
    expires_at: datetime
    link: str
    email_sent: bool
    email_error: Optional[str] = None


class InviteDetails(BaseModel):
    """What the setup page prefills from a valid token"""

    email: str
    store_id: int
    store_name: Optional[str] = None
    role_id: int
    role_name: Optional[str] = None
    employee_id: Optional[int] = None
    expires_at: datetime


class AccountSetup(BaseModel):
    token: str
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
