"""Employee service - directory, profile edits and dashboard metrics"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_OWNER,
    Activity,
    Employee,
    EmployeeAvailability,
)
from ...models_chat import ChatRoomParticipant, Message
from ...shared.photos import get_profile_photo_url
from ..requests.repository import STATUS_PENDING, RequestRepository
from ..requests.service import ACTIVITY_TYPE_TIME_OFF, REQUEST_TYPE_TIME_OFF
from .repository import EmployeeRepository
from .schemas import EmployeeUpdate

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


def serialize_employee(employee: Employee) -> dict:
    return {
        "employee_id": employee.employee_id,
        "id": employee.id,
        "email": employee.email,
        "store_id": employee.store_id,
        "store_name": employee.store.store_name if employee.store else None,
        "role_id": employee.role_id,
        "role_name": employee.role.role_name if employee.role else None,
        "first_name": employee.first_name,
        "middle_name": employee.middle_name,
        "last_name": employee.last_name,
        "preferred_name": employee.preferred_name,
        "full_name": employee.full_name,
        "date_of_birth": employee.date_of_birth,
        "gender": employee.gender,
        "address_line_1": employee.address_line_1,
        "address_line_2": employee.address_line_2,
        "postal_code": employee.postal_code,
        "city": employee.city,
        "province": employee.province,
        "country": employee.country,
        "phone": employee.phone,
        "salary": employee.salary,
        "profile_photo_url": get_profile_photo_url(employee.profile_photo_path),
        "created_at": employee.created_at,
    }


class EmployeeService:
    """Service layer for employees"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EmployeeRepository()

    def list_employees(self, store_id: Optional[int] = None) -> list[dict]:
        return [serialize_employee(e) for e in self.repo.list_employees(self.db, store_id)]

    def get_store_team(self, store_id: int) -> list[dict]:
        return self.list_employees(store_id)

    def _get(self, employee_id: int) -> Employee:
        employee = self.repo.get_employee(self.db, employee_id)
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
        return employee

    @staticmethod
    def check_access(actor: Employee, employee: Employee) -> None:
        """Owners and admins reach everyone, managers their store, others themselves"""
        if actor.role_id in (ROLE_OWNER, ROLE_ADMIN):
            return
        if actor.role_id == ROLE_MANAGER and actor.store_id == employee.store_id:
            return
        if actor.employee_id == employee.employee_id:
            return
        raise HTTPException(status_code=403, detail="Access Denied")

    def get_employee(self, actor: Employee, employee_id: int) -> dict:
        employee = self._get(employee_id)
        self.check_access(actor, employee)
        return serialize_employee(employee)

    def get_me(self, employee: Employee) -> dict:
        return serialize_employee(employee)

    def update_employee(self, actor: Employee, employee_id: int, data: EmployeeUpdate) -> dict:
        employee = self._get(employee_id)
        self.check_access(actor, employee)

        changes = data.model_dump(exclude_unset=True)
        # Store, role and pay are managed by owners and admins
        restricted = {"store_id", "role_id", "salary"} & changes.keys()
        if restricted and actor.role_id not in (ROLE_OWNER, ROLE_ADMIN):
            raise HTTPException(
                status_code=403, detail=f"Not allowed to change {', '.join(sorted(restricted))}"
            )
        if changes.get("role_id") == ROLE_OWNER and actor.role_id != ROLE_OWNER:
            raise HTTPException(status_code=403, detail="Only owners can assign the Owner role")

        for field, value in changes.items():
            setattr(employee, field, value)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update employee {employee_id}: {e}")
            raise HTTPException(status_code=400, detail="Invalid store or role") from e

        self.db.refresh(employee)
        logger.info(f"✏️ Employee {employee_id} updated: {', '.join(changes) or 'no changes'}")
        return serialize_employee(employee)

    def delete_employee(self, actor: Employee, employee_id: int) -> None:
        employee = self._get(employee_id)
        if actor.employee_id == employee_id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")
        if employee.role_id == ROLE_OWNER and actor.role_id != ROLE_OWNER:
            raise HTTPException(status_code=403, detail="Access Denied")
        if actor.role_id == ROLE_MANAGER and actor.store_id != employee.store_id:
            raise HTTPException(status_code=403, detail="Access Denied")

        self.db.query(ChatRoomParticipant).filter(
            ChatRoomParticipant.employee_id == employee_id
        ).delete(synchronize_session=False)
        self.db.query(Message).filter(Message.sender_id == employee_id).delete(
            synchronize_session=False
        )
        self.db.query(EmployeeAvailability).filter(
            EmployeeAvailability.employee_id == employee_id
        ).delete(synchronize_session=False)
        self.db.query(Activity).filter(Activity.employee_id == employee_id).update(
            {Activity.employee_id: None}, synchronize_session=False
        )
        self.db.delete(employee)
        self.db.commit()
        logger.info(f"🗑️ Employee {employee_id} deleted by {actor.employee_id}")

    def dashboard_metrics(self, employee: Employee) -> dict:
        """Role-dependent dashboard figures"""
        metrics = {"role_id": employee.role_id}

        if employee.role_id in (ROLE_OWNER, ROLE_ADMIN):
            metrics["employee_count"] = self.repo.count_employees(self.db)
            metrics["total_payroll"] = self.repo.total_payroll(self.db)
            metrics["teams_count"] = (
                self.repo.count_stores(self.db)
                if employee.role_id == ROLE_OWNER
                else self.repo.count_staffed_stores(self.db)
            )
            metrics["pending_time_off"] = RequestRepository.count_pending(
                self.db, REQUEST_TYPE_TIME_OFF
            )
        elif employee.role_id == ROLE_MANAGER:
            metrics["team_size"] = self.repo.count_employees(self.db, employee.store_id)
            metrics["pending_requests"] = RequestRepository.count_pending(
                self.db, store_id=employee.store_id
            )
            metrics["pending_time_off"] = RequestRepository.count_pending(
                self.db, REQUEST_TYPE_TIME_OFF, employee.store_id
            )
        else:
            metrics["pending_time_off"] = len(
                [
                    r
                    for r in RequestRepository.get_for_employee(self.db, employee.employee_id)
                    if r.request_type == REQUEST_TYPE_TIME_OFF and r.status == STATUS_PENDING
                ]
            )

        metrics["recent_activities"] = self.repo.recent_activities(
            self.db, ACTIVITY_TYPE_TIME_OFF, RECENT_ACTIVITY_LIMIT
        )
        return metrics
