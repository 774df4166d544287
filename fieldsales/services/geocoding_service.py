"""
Reverse geocoding through OpenStreetMap Nominatim.

Turns check-in/check-out coordinates into a short human-readable address
("Road, Number - Suburb - City"). Lookups are bounded by a timeout and every
failure is raised as ExternalServiceDegraded so callers can absorb it.

NOTE:
Nominatim usage policy requires a valid User-Agent and at most 1 request/second.
Results are cached in Redis (when configured) keyed by rounded coordinates.
"""

import logging
from typing import Optional

import httpx

from .. import config
from ..cache import cache
from ..shared.exceptions import ExternalServiceDegraded

logger = logging.getLogger(__name__)

# ~1 m precision; nearby check-ins share a cache entry
CACHE_PRECISION = 5


def format_address(address: dict) -> Optional[str]:
    """Build "Road, Number - Suburb - City" from a Nominatim address block"""
    parts = []

    road = address.get("road")
    if road:
        house_number = address.get("house_number")
        parts.append(f"{road}, {house_number}" if house_number else road)

    suburb = address.get("suburb") or address.get("neighbourhood")
    if suburb:
        parts.append(suburb)

    city = address.get("city") or address.get("town") or address.get("village")
    if city:
        parts.append(city)

    return " - ".join(parts) if parts else None


class ReverseGeocoder:
    """Best-effort coordinates → address lookup"""

    def __init__(
        self,
        base_url: str = config.NOMINATIM_BASE_URL,
        user_agent: str = config.NOMINATIM_USER_AGENT,
        accept_language: str = config.NOMINATIM_ACCEPT_LANGUAGE,
        timeout: float = config.GEOCODING_TIMEOUT_SECONDS,
        cache_seconds: int = config.GEOCODING_CACHE_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.accept_language = accept_language
        self.timeout = timeout
        self.cache_seconds = cache_seconds
        self.transport = transport

    @staticmethod
    def _cache_key(latitude: float, longitude: float) -> str:
        return f"geo:reverse:{round(latitude, CACHE_PRECISION)}:{round(longitude, CACHE_PRECISION)}"

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Resolve coordinates to an address.

        Returns:
            Formatted address, or None when the provider knows no address there

        Raises:
            ExternalServiceDegraded: timeout, transport error, non-OK status or malformed payload
        """
        cache_key = self._cache_key(latitude, longitude)
        cached = cache.get(cache_key)
        if cached:
            return cached.get("address")

        params = {
            "format": "json",
            "lat": str(latitude),
            "lon": str(longitude),
            "zoom": "18",
            "addressdetails": "1",
        }
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
            "Accept": "application/json",
        }
        url = f"{self.base_url}/reverse"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise ExternalServiceDegraded(f"Reverse geocode timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise ExternalServiceDegraded(f"Reverse geocode request failed: {e}") from e

        if resp.status_code >= 400:
            raise ExternalServiceDegraded(
                f"Nominatim error {resp.status_code}: {resp.text[:200]}"
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ExternalServiceDegraded("Nominatim returned a non-JSON payload") from e

        if not isinstance(payload, dict):
            raise ExternalServiceDegraded("Nominatim returned an unexpected payload")

        address_block = payload.get("address")
        if address_block is None:
            # e.g. {"error": "Unable to geocode"} for open sea
            logger.info(f"No address for ({latitude}, {longitude}): {payload.get('error')}")
            return None
        if not isinstance(address_block, dict):
            raise ExternalServiceDegraded("Nominatim address block is malformed")

        address = format_address(address_block)
        cache.set(cache_key, {"address": address}, self.cache_seconds)
        return address


def get_reverse_geocoder() -> Optional[ReverseGeocoder]:
    """Geocoder used by the visit endpoints; None when geocoding is disabled"""
    if not config.GEOCODING_ENABLED:
        return None
    return ReverseGeocoder()
