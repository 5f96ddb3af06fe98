"""Employee repository - Database operations for employees and the dashboard"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Activity, Employee, Store


class EmployeeRepository:
    """Repository for employee database operations"""

    @staticmethod
    def list_employees(db: Session, store_id: Optional[int] = None) -> list[Employee]:
        query = db.query(Employee).options(joinedload(Employee.role), joinedload(Employee.store))
        if store_id is not None:
            query = query.filter(Employee.store_id == store_id)
        return query.order_by(Employee.first_name, Employee.last_name).all()

    @staticmethod
    def get_employee(db: Session, employee_id: int) -> Optional[Employee]:
        return (
            db.query(Employee)
            .options(joinedload(Employee.role), joinedload(Employee.store))
            .filter(Employee.employee_id == employee_id)
            .first()
        )

    @staticmethod
    def count_employees(db: Session, store_id: Optional[int] = None) -> int:
        query = db.query(func.count(Employee.employee_id))
        if store_id is not None:
            query = query.filter(Employee.store_id == store_id)
        return query.scalar() or 0

    @staticmethod
    def total_payroll(db: Session) -> float:
        return float(db.query(func.coalesce(func.sum(Employee.salary), 0)).scalar() or 0)

    @staticmethod
    def count_stores(db: Session) -> int:
        return db.query(func.count(Store.store_id)).scalar() or 0

    @staticmethod
    def count_staffed_stores(db: Session) -> int:
        return (
            db.query(func.count(func.distinct(Employee.store_id)))
            .filter(Employee.store_id.isnot(None))
            .scalar()
            or 0
        )

    @staticmethod
    def recent_activities(db: Session, exclude_type: str, limit: int = 5) -> list[Activity]:
        return (
            db.query(Activity)
            .filter(Activity.type != exclude_type)
            .order_by(Activity.timestamp.desc(), Activity.id.desc())
            .limit(limit)
            .all()
        )
