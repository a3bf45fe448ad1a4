"""Pydantic models for hidden gems."""
from typing import List, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="


class GemRecord(BaseModel):
    """A community-submitted point of interest, as held by the GemStore."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    image: Optional[str] = None
    submitted_by: str = Field("Anonymous", alias="submittedBy")
    created_at: Optional[str] = Field(None, alias="createdAt")

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def maps_url(self) -> Optional[str]:
        """Google Maps search link for the address, if there is one."""
        if not self.address:
            return None
        return MAPS_SEARCH_URL + quote(self.address, safe="")


class GeocodeResult(BaseModel):
    """Coordinates and canonical address for a geocoded query."""
    lat: float
    lng: float
    formatted_address: Optional[str] = None


class ImageUpload(BaseModel):
    """An image file attached to a submission."""
    filename: str
    content_type: str = "application/octet-stream"
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return "jpg"
        return self.filename.rsplit(".", 1)[-1].lower() or "jpg"


class GemSubmission(BaseModel):
    """Form payload for a new gem.

    Coordinates may arrive as raw form strings; the pipeline parses them.
    """
    name: str = ""
    description: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[Union[float, str]] = None
    lng: Optional[Union[float, str]] = None
    image: Optional[ImageUpload] = None


class MapMarker(BaseModel):
    """Marker for the gems location map."""
    title: str
    lat: float
    lng: float
    description: Optional[str] = None
    location: str = ""


class GemListResponse(BaseModel):
    """Snapshot of the store returned to clients."""
    gems: List[GemRecord]
    loading: bool = False
    submitting: bool = False
