"""Geocode resolver backed by the Google Geocoding web service."""
import logging
from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.errors import GeocodeUnresolved, describe_lookup_failure
from app.models.gems import GeocodeResult
from app.models.lookup import Found, LookupResult, NotFound

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GeocodeResolver:
    """Single-shot address lookup. Never raises."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        region: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.lookup_timeout)
        self.region = region if region is not None else settings.geocode_region

    async def resolve(self, address: str) -> LookupResult:
        """
        Geocode an address.

        The HTTP client's own timeout bounds how long this may take.

        Returns:
            Found(GeocodeResult) or NotFound(reason)
        """
        if not self.api_key:
            return NotFound(reason="not configured")
        if not address or not address.strip():
            return NotFound(reason="empty address")

        try:
            result = await self._geocode(address.strip())
        except GeocodeUnresolved as exc:
            logger.info(f"Address not resolved '{address}': {exc}")
            return NotFound(reason=str(exc))
        except Exception as exc:
            reason = describe_lookup_failure(exc)
            logger.warning(f"Geocoding failed for '{address}': {reason}")
            return NotFound(reason=reason)

        return Found(value=result)

    async def _geocode(self, address: str) -> GeocodeResult:
        params: Dict[str, Any] = {"address": address, "key": self.api_key}
        if self.region:
            params["region"] = self.region

        response = await self.http_client.get(GEOCODE_URL, params=params)
        response.raise_for_status()
        data = response.json()

        if data.get("status") != "OK" or not data.get("results"):
            raise GeocodeUnresolved(f"Google Geocoding status: {data.get('status')}")

        top = data["results"][0]
        location = top["geometry"]["location"]
        return GeocodeResult(
            lat=location["lat"],
            lng=location["lng"],
            formatted_address=top.get("formatted_address"),
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()


# Global instance
geocode_resolver = GeocodeResolver()
