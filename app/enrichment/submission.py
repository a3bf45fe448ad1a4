"""
Submission pipeline for new gems.

Steps run in order and each one is a gate: upload the attached image,
resolve coordinates (explicit values, else one geocode lookup), persist via
the create API, then merge into the store exactly like a fetched record.
Nothing reaches the store unless the create call succeeded.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from app.config import settings
from app.enrichment.coordinator import EnrichmentCoordinator, enrichment_coordinator
from app.errors import (
    AuthRequired,
    CreateFailed,
    GeocodeUnresolved,
    HiddenGemsError,
    InvalidSubmission,
)
from app.models.gems import GemRecord, GemSubmission, ImageUpload
from app.models.lookup import Found
from app.services.auth import AuthSession
from app.services.gem_store import GemStore, gem_store
from app.services.geocode_resolver import GeocodeResolver, geocode_resolver
from app.services.hidden_gems_api import HiddenGemsApiClient, hidden_gems_api
from app.services.notifier import Notifier, notifier
from app.services.storage import StorageClient, storage_client
from app.utils.normalizers import normalize_gem, parse_coordinate

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Orchestrates upload, geocode fallback, create and merge for one gem."""

    def __init__(
        self,
        store: Optional[GemStore] = None,
        api: Optional[HiddenGemsApiClient] = None,
        storage: Optional[StorageClient] = None,
        geocoder: Optional[GeocodeResolver] = None,
        coordinator: Optional[EnrichmentCoordinator] = None,
        notifications: Optional[Notifier] = None,
        max_image_bytes: Optional[int] = None,
    ):
        self.store = store if store is not None else gem_store
        self.api = api if api is not None else hidden_gems_api
        self.storage = storage if storage is not None else storage_client
        self.geocoder = geocoder if geocoder is not None else geocode_resolver
        self.coordinator = coordinator if coordinator is not None else enrichment_coordinator
        self.notifications = notifications if notifications is not None else notifier
        self.max_image_bytes = max_image_bytes or settings.max_image_bytes
        self._active = 0

    @property
    def in_progress(self) -> bool:
        return self._active > 0

    async def submit(self, form: GemSubmission, session: AuthSession) -> GemRecord:
        """
        Submit a new gem.

        Args:
            form: Submitted form fields and optional image
            session: Caller's auth session

        Returns:
            The stored GemRecord, already prepended to the store

        Raises:
            AuthRequired: no authenticated session, nothing was sent
            InvalidSubmission: the form was rejected before any network call
            UploadFailed: the image could not be stored, nothing was persisted
            CreateFailed: the backend did not persist the gem
        """
        if not session.is_authenticated:
            error = AuthRequired("Submission without an authenticated session")
            self.notifications.error(error.user_message, recipient=session.notification_key)
            raise error

        self._active += 1
        try:
            return await self._run(form, session)
        except HiddenGemsError as exc:
            logger.error(f"Error adding gem: {exc}")
            self.notifications.error(exc.user_message, recipient=session.notification_key)
            raise
        finally:
            self._active -= 1

    async def _run(self, form: GemSubmission, session: AuthSession) -> GemRecord:
        name = (form.name or "").strip()
        if not name:
            raise InvalidSubmission("Missing place name", user_message="Name is required")
        image_url = None
        if form.image is not None:
            self._validate_image(form.image)
            image_url = await self.storage.upload(form.image)

        lat, lng, address = await self._resolve_location(form)

        payload: Dict[str, Any] = {
            "name": name,
            "description": form.description or "",
            "address": address or "",
            "lat": lat,
            "lng": lng,
            "image": image_url,
        }
        raw_gem = await self.api.create_gem(payload, token=session.token)

        record = normalize_gem(raw_gem, fallback_image=image_url)
        if record is None:
            raise CreateFailed(f"Create API returned an unusable gem: {raw_gem!r}")

        self.store.prepend(record)
        logger.info(f"Added gem {record.id} ({record.name})")
        self.notifications.success("Hidden gem shared!", recipient=session.notification_key)

        if not record.image:
            self.coordinator.enrich(record)
        return record

    def _validate_image(self, image: ImageUpload) -> None:
        if image.size > self.max_image_bytes:
            limit_mb = self.max_image_bytes // (1024 * 1024)
            raise InvalidSubmission(
                f"Image of {image.size} bytes exceeds {self.max_image_bytes}",
                user_message=f"Image size must be less than {limit_mb}MB",
            )
        if not image.content_type.startswith("image/"):
            raise InvalidSubmission(
                f"Unsupported content type {image.content_type}",
                user_message="Only image files can be attached",
            )

    async def _resolve_location(
        self, form: GemSubmission
    ) -> Tuple[Optional[float], Optional[float], Optional[str]]:
        """Explicit coordinates win; otherwise geocode the address once."""
        address = (form.address or "").strip() or None
        lat = parse_coordinate(form.lat)
        lng = parse_coordinate(form.lng)
        if lat is not None and lng is not None:
            return lat, lng, address

        if not address:
            return None, None, None

        result = await self.geocoder.resolve(address)
        if isinstance(result, Found):
            geocoded = result.value
            return geocoded.lat, geocoded.lng, geocoded.formatted_address or address

        unresolved = GeocodeUnresolved(f"{address!r}: {result.reason}")
        logger.info(f"Proceeding without coordinates: {unresolved}")
        return None, None, address


# Global instance
submission_pipeline = SubmissionPipeline()
