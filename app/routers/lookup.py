"""
Lookup Router
Exposes the photo and geocode resolvers, and proxies Google Places photos
so that photo URLs handed to clients never carry the API key.
"""
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from app.dependencies import get_geocode_resolver, get_photo_resolver
from app.errors import describe_lookup_failure
from app.models.lookup import Found
from app.services.geocode_resolver import GeocodeResolver
from app.services.photo_resolver import PHOTO_URL, PhotoResolver

router = APIRouter(prefix="/lookup", tags=["lookup"])
logger = logging.getLogger(__name__)


@router.get("/photo")
async def lookup_photo(
    name: str = Query(..., description="Place name"),
    lat: Optional[float] = Query(None, description="Latitude bias"),
    lng: Optional[float] = Query(None, description="Longitude bias"),
    resolver: PhotoResolver = Depends(get_photo_resolver),
):
    """
    Resolve a fallback photo for a place.

    Returns:
        {"found": true, "url": ...} or {"found": false}
    """
    result = await resolver.resolve(name, lat, lng)
    if isinstance(result, Found):
        return {"found": True, "url": result.value}
    return {"found": False}


@router.get("/geocode")
async def lookup_geocode(
    address: str = Query(..., description="Address to geocode"),
    resolver: GeocodeResolver = Depends(get_geocode_resolver),
):
    """
    Geocode an address.

    Returns:
        {"found": true, "lat": ..., "lng": ..., "formatted_address": ...}
        or {"found": false}
    """
    result = await resolver.resolve(address)
    if isinstance(result, Found):
        return {"found": True, **result.value.model_dump()}
    return {"found": False}


@router.get("/photo-proxy")
async def photo_proxy(
    photo_reference: str = Query(..., description="Google photo reference"),
    maxwidth: int = Query(800, ge=1, le=1600, description="Maximum width in pixels"),
    resolver: PhotoResolver = Depends(get_photo_resolver),
):
    """
    Stream a Google Places photo through this service.

    Uses the photo resolver's API key and HTTP client, so the key never
    reaches the browser and no extra connection pool is opened per request.
    """
    if not resolver.api_key:
        raise HTTPException(status_code=503, detail="Google Maps API not configured")

    try:
        upstream = await resolver.http_client.get(
            PHOTO_URL,
            params={"photoreference": photo_reference, "maxwidth": maxwidth, "key": resolver.api_key},
            follow_redirects=True,
        )
        upstream.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error(f"Photo proxy failed for {photo_reference[:16]}: {describe_lookup_failure(exc)}")
        raise HTTPException(status_code=502, detail="Failed to fetch photo")

    return Response(
        content=upstream.content,
        media_type=upstream.headers.get("content-type", "image/jpeg"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
