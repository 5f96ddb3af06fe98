"""Store repository - Database operations for stores"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Store


class StoreRepository:
    """Repository for store database operations"""

    @staticmethod
    def list_stores(db: Session) -> list[Store]:
        return db.query(Store).order_by(Store.store_name).all()

    @staticmethod
    def get_store(db: Session, store_id: int) -> Optional[Store]:
        return db.query(Store).filter(Store.store_id == store_id).first()

    @staticmethod
    def create_store(db: Session, **data) -> Store:
        store = Store(**data)
        db.add(store)
        db.commit()
        db.refresh(store)
        return store

    @staticmethod
    def get_stores_without_coordinates(db: Session) -> list[Store]:
        return (
            db.query(Store)
            .filter(or_(Store.latitude.is_(None), Store.longitude.is_(None)))
            .order_by(Store.store_id)
            .all()
        )
