"""
Data normalizers to ensure consistent gem records across the application.
Records coming from the list API and from the create API go through the same
normalizer so that a freshly submitted gem looks exactly like a fetched one.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from app.models.gems import GemRecord

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"


def derive_submitted_by(raw_user: Any) -> str:
    """Display label for the submitter: email local-part or 'Anonymous'."""
    if not isinstance(raw_user, dict):
        return ANONYMOUS
    email = raw_user.get("email")
    if not email or not isinstance(email, str):
        return ANONYMOUS
    return email.split("@")[0] or ANONYMOUS


def parse_coordinate(value: Any) -> Optional[float]:
    """
    Parse a coordinate typed into a form.

    Accepts numbers and numeric strings. Returns None for blanks, garbage
    and non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _coordinates(raw_gem: Dict[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    """Copy lat/lng only when both are well-formed numbers."""
    lat = raw_gem.get("lat")
    lng = raw_gem.get("lng")
    if _is_number(lat) and _is_number(lng):
        return float(lat), float(lng)
    return None, None


def normalize_gem(raw_gem: Dict[str, Any], fallback_image: Optional[str] = None) -> Optional[GemRecord]:
    """
    Normalize a raw gem from the backend into a GemRecord.

    Backend items look like:
    - id (string or int)
    - name (string)
    - description, address (string, optional)
    - lat, lng (number, optional)
    - image (string, optional)
    - user (object with email, optional)
    - createdAt (string, optional)

    `fallback_image` is used when the backend omits the image, e.g. the
    confirmed upload URL of a submission.
    """
    if not isinstance(raw_gem, dict) or raw_gem.get("id") is None or not raw_gem.get("name"):
        return None

    lat, lng = _coordinates(raw_gem)

    try:
        return GemRecord(
            id=str(raw_gem["id"]),
            name=raw_gem["name"],
            description=raw_gem.get("description") or None,
            address=raw_gem.get("address") or None,
            lat=lat,
            lng=lng,
            image=raw_gem.get("image") or fallback_image or None,
            submitted_by=derive_submitted_by(raw_gem.get("user")),
            created_at=raw_gem.get("createdAt") or raw_gem.get("created_at"),
        )
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        logger.warning(f"Gem {raw_gem['id']} has wrongly typed fields: {fields}")
        return None


def normalize_gems(raw_gems: List[Dict[str, Any]]) -> List[GemRecord]:
    """Normalize a list of gems, dropping items without id or name or with mistyped fields."""
    if not raw_gems:
        return []

    normalized = []
    for raw_gem in raw_gems:
        gem = normalize_gem(raw_gem)
        if gem:
            normalized.append(gem)
        else:
            logger.warning(f"Dropping malformed gem from list: {raw_gem!r}")

    return normalized
