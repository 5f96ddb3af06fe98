"""Schedule repository - Database operations for store shifts"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Employee, Store, StoreSchedule


class ScheduleRepository:
    """Repository for shift database operations"""

    @staticmethod
    def get_store(db: Session, store_id: int) -> Optional[Store]:
        return db.query(Store).filter(Store.store_id == store_id).first()

    @staticmethod
    def get_store_employee_ids(db: Session, store_id: int) -> set[int]:
        rows = db.query(Employee.employee_id).filter(Employee.store_id == store_id).all()
        return {employee_id for (employee_id,) in rows}

    @staticmethod
    def get_shifts_between(
        db: Session, store_id: int, start: datetime, end: datetime
    ) -> list[StoreSchedule]:
        return (
            db.query(StoreSchedule)
            .filter(
                StoreSchedule.store_id == store_id,
                StoreSchedule.start_time >= start,
                StoreSchedule.start_time <= end,
            )
            .order_by(StoreSchedule.start_time)
            .all()
        )

    @staticmethod
    def get_employee_shifts(db: Session, employee_id: int) -> list[StoreSchedule]:
        return (
            db.query(StoreSchedule)
            .options(joinedload(StoreSchedule.store))
            .filter(StoreSchedule.employee_id == employee_id)
            .order_by(StoreSchedule.start_time.asc())
            .all()
        )

    @staticmethod
    def get_shift(db: Session, schedule_id: int) -> Optional[StoreSchedule]:
        return db.query(StoreSchedule).filter(StoreSchedule.schedule_id == schedule_id).first()

    @staticmethod
    def bulk_insert(db: Session, shifts: list[dict]) -> int:
        if not shifts:
            return 0
        db.bulk_insert_mappings(StoreSchedule, shifts)
        db.commit()
        return len(shifts)

    @staticmethod
    def delete_shift(db: Session, shift: StoreSchedule) -> None:
        db.delete(shift)
        db.commit()
