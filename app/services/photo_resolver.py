"""
Photo resolver backed by the Google Places web service.

Finds a place by name (biased towards its coordinates when known) and turns
its first photo reference into an image URL.
"""
import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from app.config import settings
from app.errors import PhotoResolutionFailed, describe_lookup_failure
from app.models.lookup import Found, LookupResult, NotFound

logger = logging.getLogger(__name__)

FIND_PLACE_URL = "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"
PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"


class PhotoResolver:
    """Best-effort lookup of a fallback photo for a gem. Never raises."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.lookup_timeout)
        self.max_width = settings.photo_max_width
        self.proxy_url = settings.photo_proxy_url
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.photo_max_concurrency)

    async def resolve(
        self,
        name: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> LookupResult:
        """
        Look up a photo URL for a place.

        Args:
            name: Place name
            lat: Optional latitude used to bias the search
            lng: Optional longitude used to bias the search

        Returns:
            Found(url) or NotFound(reason)
        """
        if not self.api_key:
            return NotFound(reason="not configured")
        if not name:
            return NotFound(reason="no place name")

        try:
            async with self._semaphore:
                photo_reference = await self._find_photo_reference(name, lat, lng)
        except Exception as exc:
            reason = describe_lookup_failure(exc)
            logger.warning(f"Photo lookup failed for '{name}': {reason}")
            return NotFound(reason=reason)

        if not photo_reference:
            return NotFound(reason="no photo")
        return Found(value=self.photo_url(photo_reference))

    def photo_url(self, photo_reference: str) -> str:
        """Build the public URL for a photo reference."""
        if self.proxy_url:
            query = urlencode({"photo_reference": photo_reference, "maxwidth": self.max_width})
            return f"{self.proxy_url}?{query}"
        query = urlencode({
            "photoreference": photo_reference,
            "maxwidth": self.max_width,
            "key": self.api_key,
        })
        return f"{PHOTO_URL}?{query}"

    async def _find_photo_reference(
        self,
        name: str,
        lat: Optional[float],
        lng: Optional[float],
    ) -> Optional[str]:
        params: Dict[str, Any] = {
            "input": name,
            "inputtype": "textquery",
            "fields": "photos",
            "key": self.api_key,
        }
        if lat is not None and lng is not None:
            params["locationbias"] = f"point:{lat},{lng}"

        response = await self.http_client.get(FIND_PLACE_URL, params=params)
        response.raise_for_status()
        data = response.json()

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            raise PhotoResolutionFailed(f"Google Find Place status: {status}")

        for candidate in data.get("candidates", []):
            for photo in candidate.get("photos") or []:
                reference = photo.get("photo_reference")
                if reference:
                    return reference
        return None

    async def aclose(self) -> None:
        await self.http_client.aclose()


# Global instance
photo_resolver = PhotoResolver()
