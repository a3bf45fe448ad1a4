"""
Loads the gem list into the store and enriches records in the background.

Photo lookups run as independent asyncio tasks. Each reply is routed back
by gem id through `GemStore.apply_photo`, never by list position, so a
reload or a new submission landing while a lookup is in flight cannot
misdirect it.
"""

import asyncio
import logging
from typing import Optional, Set

from app.errors import ListFetchFailed
from app.models.gems import GemRecord
from app.models.lookup import Found
from app.services.gem_store import GemStore, gem_store
from app.services.hidden_gems_api import HiddenGemsApiClient, hidden_gems_api
from app.services.notifier import Notifier, notifier
from app.services.photo_resolver import PhotoResolver, photo_resolver
from app.utils.normalizers import normalize_gems

logger = logging.getLogger(__name__)


class EnrichmentCoordinator:
    """Fetches gems, loads them into the store and schedules photo lookups."""

    def __init__(
        self,
        store: Optional[GemStore] = None,
        api: Optional[HiddenGemsApiClient] = None,
        photos: Optional[PhotoResolver] = None,
        notifications: Optional[Notifier] = None,
    ):
        self.store = store if store is not None else gem_store
        self.api = api if api is not None else hidden_gems_api
        self.photos = photos if photos is not None else photo_resolver
        self.notifications = notifications if notifications is not None else notifier
        self._active_fetches = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def loading(self) -> bool:
        """True while any list fetch is in flight."""
        return self._active_fetches > 0

    @property
    def pending(self) -> int:
        """Number of photo lookups still in flight."""
        return len(self._tasks)

    async def fetch_and_enrich(self) -> bool:
        """
        Refresh the store from the list API and enrich records without photos.

        A failed fetch leaves the store as it was and emits one error
        notification.

        Returns:
            True if the list was loaded
        """
        self._active_fetches += 1
        try:
            raw_gems = await self.api.list_gems()
        except ListFetchFailed as exc:
            logger.error(f"Error fetching gems: {exc}")
            self.notifications.error(exc.user_message)
            return False
        finally:
            self._active_fetches -= 1

        records = normalize_gems(raw_gems)
        self.store.load(records)

        for record in records:
            if not record.image:
                self.enrich(record)

        logger.info(f"Scheduled {self.pending} photo lookups after loading {len(records)} gems")
        return True

    def enrich(self, record: GemRecord) -> Optional[asyncio.Task]:
        """Schedule a background photo lookup for a record without an image."""
        if record.image:
            return None
        task = asyncio.create_task(
            self._resolve_photo(record.id, record.name, record.lat, record.lng),
            name=f"gem-photo-{record.id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _resolve_photo(
        self,
        gem_id: str,
        name: str,
        lat: Optional[float],
        lng: Optional[float],
    ) -> None:
        result = await self.photos.resolve(name, lat, lng)
        if isinstance(result, Found):
            if self.store.apply_photo(gem_id, result.value):
                logger.debug(f"Applied fallback photo to gem {gem_id}")
        else:
            logger.debug(f"No fallback photo for gem {gem_id}: {result.reason}")

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Photo enrichment task {task.get_name()} crashed: {exc!r}")

    async def drain(self) -> None:
        """Wait for every outstanding photo lookup, including ones scheduled meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding photo lookups."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


# Global instance
enrichment_coordinator = EnrichmentCoordinator()
