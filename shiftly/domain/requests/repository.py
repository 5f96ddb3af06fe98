"""Employee request repository - Database operations for requests and availability"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Activity, Employee, EmployeeAvailability, EmployeeRequest

STATUS_PENDING = "Pending"


class RequestRepository:
    """Repository for employee request database operations"""

    @staticmethod
    def create_request(db: Session, activity: Optional[Activity] = None, **data) -> EmployeeRequest:
        """Insert the request, and its activity entry if any, in one commit"""
        request = EmployeeRequest(**data)
        db.add(request)
        if activity is not None:
            db.add(activity)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def get_request(db: Session, request_id: str) -> Optional[EmployeeRequest]:
        return (
            db.query(EmployeeRequest)
            .options(joinedload(EmployeeRequest.employee))
            .filter(EmployeeRequest.request_id == request_id)
            .first()
        )

    @staticmethod
    def get_pending(
        db: Session, request_type: Optional[str] = None, store_id: Optional[int] = None
    ) -> list[EmployeeRequest]:
        query = (
            db.query(EmployeeRequest)
            .options(joinedload(EmployeeRequest.employee))
            .filter(EmployeeRequest.status == STATUS_PENDING)
        )
        if request_type:
            query = query.filter(EmployeeRequest.request_type == request_type)
        if store_id is not None:
            query = query.join(Employee, Employee.employee_id == EmployeeRequest.employee_id).filter(
                Employee.store_id == store_id
            )
        return query.order_by(EmployeeRequest.created_at.desc()).all()

    @staticmethod
    def count_pending(
        db: Session, request_type: Optional[str] = None, store_id: Optional[int] = None
    ) -> int:
        query = db.query(func.count(EmployeeRequest.request_id)).filter(
            EmployeeRequest.status == STATUS_PENDING
        )
        if request_type:
            query = query.filter(EmployeeRequest.request_type == request_type)
        if store_id is not None:
            query = query.join(Employee, Employee.employee_id == EmployeeRequest.employee_id).filter(
                Employee.store_id == store_id
            )
        return query.scalar() or 0

    @staticmethod
    def get_for_employee(db: Session, employee_id: int) -> list[EmployeeRequest]:
        return (
            db.query(EmployeeRequest)
            .filter(EmployeeRequest.employee_id == employee_id)
            .order_by(EmployeeRequest.created_at.desc())
            .all()
        )

    @staticmethod
    def get_availability(db: Session, employee_id: int) -> list[EmployeeAvailability]:
        return (
            db.query(EmployeeAvailability)
            .filter(EmployeeAvailability.employee_id == employee_id)
            .order_by(EmployeeAvailability.start_time)
            .all()
        )
