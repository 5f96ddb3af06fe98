"""Employee request router - submit, review, approve and reject"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_current_employee, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from .schemas import (
    AvailabilityResponse,
    EmployeeRequestCreate,
    EmployeeRequestResponse,
    RequestResult,
)
from .service import REQUEST_TYPES, RequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Employee Requests"])

require_reviewer = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


def get_request_service(db: Session = Depends(get_db)) -> RequestService:
    """Dependency injection for RequestService"""
    return RequestService(db)


def review_scope(reviewer: Employee) -> Optional[int]:
    """Managers only see their own store; owners and admins see every store"""
    return reviewer.store_id if reviewer.role_id == ROLE_MANAGER else None


def _result(result: dict, failure_status: int = 400) -> JSONResponse:
    payload = {k: v for k, v in result.items() if v is not None}
    return JSONResponse(status_code=200 if result["success"] else failure_status, content=payload)


@router.post("", response_model=RequestResult)
async def submit_request(
    data: EmployeeRequestCreate,
    employee: Employee = Depends(get_current_employee),
    service: RequestService = Depends(get_request_service),
):
    result = service.submit_employee_request(
        {
            "employee_id": employee.employee_id,
            "request_type": data.request_type,
            "request": data.request,
        }
    )
    return _result(result)


@router.get("/mine", response_model=list[EmployeeRequestResponse])
async def my_requests(
    employee: Employee = Depends(get_current_employee),
    service: RequestService = Depends(get_request_service),
):
    return service.get_my_requests(employee.employee_id)


@router.get("/availability/mine", response_model=list[AvailabilityResponse])
async def my_availability(
    employee: Employee = Depends(get_current_employee),
    service: RequestService = Depends(get_request_service),
):
    return service.get_availability(employee.employee_id)


@router.get("/pending", response_model=list[EmployeeRequestResponse])
async def pending_requests(
    request_type: Optional[str] = Query(None, alias="type"),
    reviewer: Employee = Depends(require_reviewer),
    service: RequestService = Depends(get_request_service),
):
    if request_type and request_type not in REQUEST_TYPES:
        raise HTTPException(status_code=400, detail="Invalid request_type.")
    return service.fetch_pending_requests(request_type, review_scope(reviewer))


@router.get("/pending/time-off/count")
async def pending_time_off_count(
    reviewer: Employee = Depends(require_reviewer),
    service: RequestService = Depends(get_request_service),
):
    return {"count": service.fetch_pending_time_off_count(review_scope(reviewer))}


def _check_scope(service: RequestService, request_id: str, reviewer: Employee) -> None:
    scope = review_scope(reviewer)
    if scope is None:
        return
    store_id = service.request_store_id(request_id)
    # Unknown ids fall through so the caller gets "Request not found."
    if store_id is not None and store_id != scope:
        raise HTTPException(status_code=403, detail="Access Denied")


@router.post("/{request_id}/approve", response_model=RequestResult)
async def approve_request(
    request_id: str,
    reviewer: Employee = Depends(require_reviewer),
    service: RequestService = Depends(get_request_service),
):
    _check_scope(service, request_id, reviewer)
    result = service.approve_employee_request(request_id)
    return _result(result, 404 if result.get("error") == "Request not found." else 400)


@router.post("/{request_id}/reject", response_model=RequestResult)
async def reject_request(
    request_id: str,
    reviewer: Employee = Depends(require_reviewer),
    service: RequestService = Depends(get_request_service),
):
    _check_scope(service, request_id, reviewer)
    result = service.reject_employee_request(request_id)
    return _result(result, 404 if result.get("error") == "Request not found." else 400)
