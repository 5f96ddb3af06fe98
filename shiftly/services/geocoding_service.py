"""
Nominatim (OpenStreetMap) geocoding for store addresses.
No API key required, just a user agent string.
"""

import logging
from typing import Any, Optional

import httpx

from ..config import NOMINATIM_BASE_URL, NOMINATIM_USER_AGENT
from ..exceptions import GeocodingError

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = (
    "address_line_1",
    "address_line_2",
    "city",
    "province",
    "postal_code",
    "country",
)


def build_store_address(store: Any) -> str:
    """Join the non-empty address parts of a store (model or dict) with ', '"""
    parts = []
    for field in ADDRESS_FIELDS:
        value = store.get(field) if isinstance(store, dict) else getattr(store, field, None)
        if value and str(value).strip():
            parts.append(str(value).strip())
    return ", ".join(parts)


async def geocode_address(
    address: str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Optional[dict[str, float]]:
    """
    Look up an address.

    Returns:
        {"latitude": float, "longitude": float}, or None when nothing matched

    Raises:
        GeocodingError: the lookup service failed or returned an error
    """
    address = (address or "").strip()
    if not address:
        return None

    params = {"format": "json", "q": address, "limit": "1"}
    headers = {"User-Agent": NOMINATIM_USER_AGENT}
    url = f"{NOMINATIM_BASE_URL}/search"

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.get(url, params=params, headers=headers, timeout=10.0)
    except httpx.HTTPError as e:
        logger.error(f"❌ Nominatim request failed: {str(e)}")
        raise GeocodingError(f"Address lookup failed: {str(e)}") from e

    if resp.status_code >= 400:
        logger.warning(f"Nominatim API error {resp.status_code}: {resp.text[:200]}")
        raise GeocodingError(f"Address lookup service returned {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        logger.warning(f"Nominatim returned a non-JSON body: {resp.text[:200]}")
        raise GeocodingError("Unexpected geocoding response") from e

    if not data:
        logger.info(f"🔍 No geocoding match for: {address}")
        return None

    try:
        return {"latitude": float(data[0]["lat"]), "longitude": float(data[0]["lon"])}
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError("Unexpected geocoding response") from e
