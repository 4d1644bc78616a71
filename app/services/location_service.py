"""
app/services/location_service.py

Purpose: Declared-vs-observed location verification

- Required-field and GPS availability checks (no strike)
- Reverse geocoding of device coordinates (failures are retryable, no strike)
- Country / region / city matching, one strike per failed check
- Automatic ban when the strike threshold is reached
"""

from typing import Optional

from app.core.config import settings
from app.core.exceptions import (
    AccountBannedError,
    GeolocationError,
    LocationMismatchError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.models.order import VerifiedLocation
from app.services.ban_service import BanService
from app.services.country_service import CountryService
from app.services.geocoding_service import GeocodingService, ObservedLocation
from utils.constants import (
    BANNED_MESSAGE,
    CITY_MISMATCH_MESSAGE,
    COUNTRY_MISMATCH_MESSAGE,
    GPS_DENIED_MESSAGE,
    GPS_TIMEOUT_MESSAGE,
    GPS_UNSUPPORTED_MESSAGE,
    LOCATION_FIELDS_REQUIRED_MESSAGE,
    REGION_MISMATCH_MESSAGE,
)
from utils.location_utils import country_matches, matches, mismatch_label

logger = get_logger(__name__)

GPS_ERROR_MESSAGES = {
    "unsupported": GPS_UNSUPPORTED_MESSAGE,
    "denied": GPS_DENIED_MESSAGE,
    "timeout": GPS_TIMEOUT_MESSAGE,
}


def geolocation_options() -> dict:
    """Acquisition options the client must use for the device fix."""
    return {
        "enableHighAccuracy": True,
        "timeoutMs": settings.GEOLOCATION_TIMEOUT_MS,
        "maximumAgeMs": 0,
    }


class LocationService:
    """
    Runs one verification attempt:
    collecting-input -> acquiring-gps -> reverse-geocoding -> matching.
    """

    def __init__(
        self,
        bans: BanService,
        geocoder: GeocodingService,
        countries: CountryService,
    ):
        self.bans = bans
        self.geocoder = geocoder
        self.countries = countries

    async def verify(
        self,
        uid: str,
        country: str,
        region: str,
        city: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        gps_error: Optional[str] = None,
    ) -> VerifiedLocation:
        """
        Verifies a declared location against the device position.

        Args:
            uid: Signed-in user
            country: Declared country name (from the country list)
            region: Declared region
            city: Declared city
            lat, lng: Device coordinates
            gps_error: "unsupported", "denied" or "timeout" when the device gave no fix

        Returns:
            VerifiedLocation with the declared names and device coordinates

        Raises:
            AccountBannedError: User is (or just became) banned
            ValidationError: Missing fields
            GeolocationError: No device fix
            GeocodingError: Reverse geocoding failed
            LocationMismatchError: A check failed, one strike charged
        """
        with LogContext(user_id=uid, view="location-verify"):
            status = await self.bans.get_status(uid)
            if status.is_banned:
                raise AccountBannedError(BANNED_MESSAGE)

            if not (country or "").strip() or not (region or "").strip() or not (city or "").strip():
                raise ValidationError(LOCATION_FIELDS_REQUIRED_MESSAGE)

            if gps_error or lat is None or lng is None:
                logger.info(f"No GPS fix ({gps_error or 'missing coordinates'})")
                raise GeolocationError(
                    GPS_ERROR_MESSAGES.get(gps_error, GPS_DENIED_MESSAGE),
                    details={"reason": gps_error or "denied"}
                )

            observed = await self.geocoder.reverse(lat, lng)

            logger.debug(f"Matching declared {country}/{region}/{city}")
            await self._check(uid, country, region, city, observed)

            logger.info(f"✅ Location verified: {city}, {region}, {country}")
            return VerifiedLocation(
                country=country,
                region=region,
                city=city,
                lat=lat,
                lng=lng,
            )

    async def _check(
        self,
        uid: str,
        country: str,
        region: str,
        city: str,
        observed: ObservedLocation,
    ) -> None:
        declared_country = await self.countries.find(country)
        declared_code = declared_country.iso_code if declared_country else None

        if not country_matches(country, declared_code, observed.country, observed.country_code):
            await self._strike(uid, "country", COUNTRY_MISMATCH_MESSAGE, observed.country)
        if not matches(region, observed.region):
            await self._strike(uid, "region", REGION_MISMATCH_MESSAGE, observed.region)
        if not matches(city, observed.city):
            await self._strike(uid, "city", CITY_MISMATCH_MESSAGE, observed.city)

    async def _strike(self, uid: str, field: str, template: str, observed: Optional[str]) -> None:
        """
        Charges one strike and raises the matching failure.
        """
        status = await self.bans.increment_strike(uid)
        if status.is_banned:
            raise AccountBannedError(BANNED_MESSAGE, details={"field": field})

        logger.warning(f"Location mismatch on {field}: observed {observed!r}")
        raise LocationMismatchError(
            template.format(observed=mismatch_label(observed)),
            details={
                "field": field,
                "observed": observed,
                "strikes": status.attempts,
                "maxStrikes": self.bans.max_strikes,
            }
        )
