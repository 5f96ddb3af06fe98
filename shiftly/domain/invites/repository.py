"""Invite repository - Database operations for setup tokens"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Employee, Role, SetupToken, Store


class InviteRepository:
    """Repository for setup token database operations"""

    @staticmethod
    def create_token(db: Session, **data) -> SetupToken:
        token = SetupToken(**data)
        db.add(token)
        db.commit()
        db.refresh(token)
        return token

    @staticmethod
    def get_token(db: Session, token: str) -> Optional[SetupToken]:
        return db.query(SetupToken).filter(SetupToken.token == token).first()

    @staticmethod
    def get_store(db: Session, store_id: int) -> Optional[Store]:
        return db.query(Store).filter(Store.store_id == store_id).first()

    @staticmethod
    def get_role(db: Session, role_id: int) -> Optional[Role]:
        return db.query(Role).filter(Role.role_id == role_id).first()

    @staticmethod
    def get_employee_by_email(db: Session, email: str) -> Optional[Employee]:
        return db.query(Employee).filter(func.lower(Employee.email) == email.lower()).first()

    @staticmethod
    def get_employee_by_id(db: Session, employee_id: int) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.employee_id == employee_id).first()

    @staticmethod
    def get_employee_by_auth_id(db: Session, user_id: str) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.id == user_id).first()

    @staticmethod
    def delete_expired(db: Session, now: datetime) -> int:
        deleted = (
            db.query(SetupToken)
            .filter(SetupToken.is_used.is_(False), SetupToken.expires_at < now)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
