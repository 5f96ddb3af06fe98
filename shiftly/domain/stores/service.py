"""
Store service - store setup, geofence location and geocoding

Bulk geocoding walks the stores that still lack coordinates, one Nominatim
request at a time with a delay between requests.
"""

import asyncio
import logging
from typing import Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CLOCK_RADIUS_METERS, GEOCODE_DELAY_SECONDS
from ...exceptions import GeocodingError
from ...models import Store
from ...services.geocoding_service import build_store_address, geocode_address
from ...utils.timezone_utils import is_valid_timezone
from .repository import StoreRepository
from .schemas import StoreCreate

logger = logging.getLogger(__name__)

STATUS_GEOCODED = "geocoded"
STATUS_GEOCODE_FAILED = "geocode_failed"


class StoreService:
    """Service layer for stores"""

    def __init__(self, db: Session, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.db = db
        self.repo = StoreRepository()
        self.transport = transport

    def list_stores(self) -> list[Store]:
        return self.repo.list_stores(self.db)

    def get_store(self, store_id: int) -> Store:
        store = self.repo.get_store(self.db, store_id)
        if not store:
            raise HTTPException(status_code=404, detail="Store not found")
        return store

    def create_store(self, data: StoreCreate) -> Store:
        store = self.repo.create_store(self.db, **data.model_dump())
        logger.info(f"🏪 Store {store.store_id} created: {store.store_name}")
        return store

    async def _geocode(self, store: Store) -> dict:
        result = {"store_id": store.store_id, "store_name": store.store_name, "success": False}
        address = build_store_address(store)
        if not address:
            result["error"] = "No address"
            return result

        try:
            coords = await geocode_address(address, transport=self.transport)
        except GeocodingError as e:
            coords = None
            result["error"] = str(e)
        else:
            if coords is None:
                result["error"] = "Address not found"

        if coords:
            store.latitude = coords["latitude"]
            store.longitude = coords["longitude"]
            store.status = STATUS_GEOCODED
            result.update(success=True, **coords)
        else:
            store.status = STATUS_GEOCODE_FAILED
        self.db.commit()
        return result

    async def geocode_store(self, store_id: int) -> dict:
        store = self.get_store(store_id)
        result = await self._geocode(store)
        if result["success"]:
            logger.info(
                f"📍 Store {store_id} geocoded to {result['latitude']}, {result['longitude']}"
            )
        else:
            logger.warning(f"⚠️ Store {store_id} geocoding failed: {result.get('error')}")
        return result

    async def bulk_geocode_stores(self, delay: float = GEOCODE_DELAY_SECONDS) -> dict:
        """Geocode every store missing coordinates"""
        stores = self.repo.get_stores_without_coordinates(self.db)
        logger.info(f"🔄 Bulk geocoding {len(stores)} stores")

        results = []
        for i, store in enumerate(stores):
            results.append(await self._geocode(store))
            if delay and i < len(stores) - 1:
                await asyncio.sleep(delay)

        success = sum(1 for r in results if r["success"])
        summary = {
            "total": len(results),
            "success": success,
            "failed": len(results) - success,
            "results": results,
        }
        logger.info(f"✅ Bulk geocoding done: {success}/{len(results)} stores geocoded")
        return summary

    def update_store_location(
        self, store_id: int, latitude: float, longitude: float, radius: Optional[int] = None
    ) -> Store:
        store = self.get_store(store_id)
        store.latitude = latitude
        store.longitude = longitude
        store.clock_radius_meters = radius or store.clock_radius_meters or CLOCK_RADIUS_METERS
        store.status = STATUS_GEOCODED
        self.db.commit()
        self.db.refresh(store)
        logger.info(f"📍 Store {store_id} location set ({store.clock_radius_meters}m radius)")
        return store

    def set_store_timezone(self, store_id: int, tz: str) -> Store:
        if not is_valid_timezone(tz):
            raise HTTPException(status_code=400, detail=f"Invalid timezone: {tz}")
        store = self.get_store(store_id)
        store.timezone = tz
        self.db.commit()
        self.db.refresh(store)
        logger.info(f"🕐 Store {store_id} timezone set to {tz}")
        return store
