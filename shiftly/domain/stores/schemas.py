"""Store schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_timezone


class StoreCreate(BaseModel):
    store_name: str = Field(..., min_length=1, max_length=255)
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        return validate_timezone(v)


class StoreResponse(BaseModel):
    store_id: int
    store_name: str
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    status: Optional[str] = None
    clock_radius_meters: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreLocationUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius: Optional[int] = Field(None, gt=0, le=5000)


class StoreTimezoneUpdate(BaseModel):
    timezone: str

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        return validate_timezone(v)


class GeocodeResult(BaseModel):
    store_id: int
    store_name: Optional[str] = None
    success: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = None


class BulkGeocodeResponse(BaseModel):
    total: int
    success: int
    failed: int
    results: list[GeocodeResult]
