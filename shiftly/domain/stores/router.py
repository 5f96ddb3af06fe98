"""Store router - store setup, location and geocoding"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_employee, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from ...utils.timezone_utils import COMMON_TIMEZONES
from ..schedules.service import ScheduleService
from .schemas import (
    BulkGeocodeResponse,
    GeocodeResult,
    StoreCreate,
    StoreLocationUpdate,
    StoreResponse,
    StoreTimezoneUpdate,
)
from .service import StoreService

router = APIRouter(prefix="/stores", tags=["Stores"])

require_store_admin = require_roles(ROLE_OWNER, ROLE_ADMIN)
require_store_manager = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


def get_store_service(db: Session = Depends(get_db)) -> StoreService:
    """Dependency injection for StoreService"""
    return StoreService(db)


@router.get("/timezones")
async def list_timezones():
    return COMMON_TIMEZONES


@router.get("", response_model=list[StoreResponse])
async def list_stores(
    employee: Employee = Depends(get_current_employee),
    service: StoreService = Depends(get_store_service),
):
    return service.list_stores()


@router.post("", response_model=StoreResponse, status_code=201)
async def create_store(
    data: StoreCreate,
    actor: Employee = Depends(require_store_admin),
    service: StoreService = Depends(get_store_service),
):
    return service.create_store(data)


@router.post("/geocode", response_model=BulkGeocodeResponse)
async def bulk_geocode(
    actor: Employee = Depends(require_store_admin),
    service: StoreService = Depends(get_store_service),
):
    return await service.bulk_geocode_stores()


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(
    store_id: int,
    employee: Employee = Depends(get_current_employee),
    service: StoreService = Depends(get_store_service),
):
    return service.get_store(store_id)


@router.post("/{store_id}/geocode", response_model=GeocodeResult)
async def geocode_store(
    store_id: int,
    actor: Employee = Depends(require_store_manager),
    service: StoreService = Depends(get_store_service),
):
    ScheduleService.check_store_access(actor, store_id)
    return await service.geocode_store(store_id)


@router.put("/{store_id}/location", response_model=StoreResponse)
async def update_location(
    store_id: int,
    data: StoreLocationUpdate,
    actor: Employee = Depends(require_store_manager),
    service: StoreService = Depends(get_store_service),
):
    ScheduleService.check_store_access(actor, store_id)
    return service.update_store_location(store_id, data.latitude, data.longitude, data.radius)


@router.put("/{store_id}/timezone", response_model=StoreResponse)
async def update_timezone(
    store_id: int,
    data: StoreTimezoneUpdate,
    actor: Employee = Depends(require_store_manager),
    service: StoreService = Depends(get_store_service),
):
    ScheduleService.check_store_access(actor, store_id)
    return service.set_store_timezone(store_id, data.timezone)
