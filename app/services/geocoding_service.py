"""
app/services/geocoding_service.py

Purpose: Reverse geocoding (Nominatim)

- Coordinates -> observed country / country code / region / city
- Region and city fall back through the address fields Nominatim may use
- Any failure is an infrastructure error (retryable, never a strike)
"""

import httpx
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.exceptions import GeocodingError
from app.core.logging import get_logger

logger = get_logger(__name__)

REGION_FIELDS = ("state", "region", "province", "state_district")
CITY_FIELDS = ("city", "town", "village", "county", "district", "suburb")

USER_AGENT = "storefront-location-check/1.0"


@dataclass
class ObservedLocation:
    country: Optional[str]
    country_code: Optional[str]
    region: Optional[str]
    city: Optional[str]


def first_present(address: dict, fields) -> Optional[str]:
    for field in fields:
        if address.get(field):
            return address[field]
    return None


class GeocodingService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = settings.NOMINATIM_URL
        self._transport = transport
        self._timeout = settings.HTTP_TIMEOUT_SECONDS

    async def reverse(self, lat: float, lng: float) -> ObservedLocation:
        """
        Reverse-geocodes device coordinates.

        Raises:
            GeocodingError: On network/HTTP failure or a response without an address
        """
        params = {
            "format": "json",
            "lat": lat,
            "lon": lng,
            "accept-language": "en",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(self.url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.error("Reverse geocoding timed out")
            raise GeocodingError()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Reverse geocoding failed: {e}")
            raise GeocodingError()

        address = data.get("address") if isinstance(data, dict) else None
        if not address:
            logger.error(f"Could not determine location from response: {data}")
            raise GeocodingError("Could not determine satellite location. Please try again.")

        code = address.get("country_code")
        observed = ObservedLocation(
            country=address.get("country"),
            country_code=code.upper() if code else None,
            region=first_present(address, REGION_FIELDS),
            city=first_present(address, CITY_FIELDS),
        )
        logger.debug(f"GPS data: {observed}")
        return observed


def get_geocoding_service() -> GeocodingService:
    return GeocodingService()
