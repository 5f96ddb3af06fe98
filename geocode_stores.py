"""
Geocode every store that has no coordinates yet
Run: python geocode_stores.py [--delay 1.1]
"""

import argparse
import asyncio
import logging
import sys

from shiftly import models_chat  # noqa: F401
from shiftly.config import GEOCODE_DELAY_SECONDS
from shiftly.database import SessionLocal
from shiftly.domain.stores.service import StoreService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def main(delay: float) -> int:
    db = SessionLocal()
    try:
        summary = await StoreService(db).bulk_geocode_stores(delay=delay)
    finally:
        db.close()

    for result in summary["results"]:
        if result["success"]:
            logger.info(
                f"✅ {result['store_name']}: {result['latitude']}, {result['longitude']}"
            )
        else:
            logger.warning(f"❌ {result['store_name']}: {result.get('error')}")

    logger.info(
        f"Done. {summary['success']} geocoded, {summary['failed']} failed, {summary['total']} total"
    )
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Geocode stores missing coordinates")
    parser.add_argument("--delay", type=float, default=GEOCODE_DELAY_SECONDS)
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.delay)))
