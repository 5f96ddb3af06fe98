"""Employee router - directory, profile and dashboard"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_employee, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from .schemas import DashboardMetrics, EmployeeResponse, EmployeeUpdate
from .service import EmployeeService

router = APIRouter(prefix="/employees", tags=["Employees"])

require_staff_manager = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


def get_employee_service(db: Session = Depends(get_db)) -> EmployeeService:
    """Dependency injection for EmployeeService"""
    return EmployeeService(db)


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    store_id: Optional[int] = Query(None),
    actor: Employee = Depends(require_staff_manager),
    service: EmployeeService = Depends(get_employee_service),
):
    # Managers only list their own store
    if actor.role_id == ROLE_MANAGER:
        store_id = actor.store_id
    return service.list_employees(store_id)


@router.get("/me", response_model=EmployeeResponse)
async def get_me(
    employee: Employee = Depends(get_current_employee),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_me(employee)


@router.get("/me/team", response_model=list[EmployeeResponse])
async def my_team(
    employee: Employee = Depends(get_current_employee),
    service: EmployeeService = Depends(get_employee_service),
):
    if employee.store_id is None:
        return []
    return service.get_store_team(employee.store_id)


@router.get("/dashboard", response_model=DashboardMetrics)
async def dashboard(
    employee: Employee = Depends(get_current_employee),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.dashboard_metrics(employee)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    actor: Employee = Depends(get_current_employee),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_employee(actor, employee_id)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    actor: Employee = Depends(get_current_employee),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.update_employee(actor, employee_id, data)


@router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: int,
    actor: Employee = Depends(require_staff_manager),
    service: EmployeeService = Depends(get_employee_service),
):
    service.delete_employee(actor, employee_id)
