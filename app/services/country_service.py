"""
app/services/country_service.py

Purpose: Country reference data

- Full country list fetched on first use and cached for the process
- Hard-coded fallback list when the fetch fails; the fallback is never
  cached, so the next call tries the API again
- Name search for the selector and ISO-code lookup for matching
"""

import httpx
from typing import List, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.models.user import StoreModel
from utils.constants import FALLBACK_COUNTRIES

logger = get_logger(__name__)


class CountryData(StoreModel):
    name: str
    iso_code: str
    flag: str = ""


def by_name(countries) -> List[CountryData]:
    return sorted(countries, key=lambda c: c.name.lower())


class CountryService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = settings.COUNTRIES_API_URL
        self._transport = transport
        self._countries: Optional[List[CountryData]] = None

    async def get_countries(self) -> List[CountryData]:
        """
        Returns the sorted country list.

        Only a successful fetch is cached; during an outage every call
        retries and answers with the fallback list.
        """
        if self._countries is not None:
            return self._countries
        try:
            self._countries = await self._fetch()
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load countries, using fallback list: {e}")
            return by_name(CountryData(**c) for c in FALLBACK_COUNTRIES)
        return self._countries

    async def _fetch(self) -> List[CountryData]:
        async with httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS, transport=self._transport
        ) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            raw = response.json()

        countries = [
            CountryData(
                name=item["name"]["common"],
                iso_code=item["cca2"],
                flag=(item.get("flags") or {}).get("svg", ""),
            )
            for item in raw
        ]
        if not countries:
            raise ValueError("empty country list")
        logger.info(f"🌍 Loaded {len(countries)} countries")
        return by_name(countries)

    async def search(self, term: str = "") -> List[CountryData]:
        countries = await self.get_countries()
        term = (term or "").strip().lower()
        if not term:
            return countries
        return [c for c in countries if term in c.name.lower()]

    async def find(self, name: str) -> Optional[CountryData]:
        for country in await self.get_countries():
            if country.name == name:
                return country
        return None


_country_service: Optional[CountryService] = None


def get_country_service() -> CountryService:
    """Process-wide instance so the list is fetched once."""
    global _country_service
    if _country_service is None:
        _country_service = CountryService()
    return _country_service
