"""In-memory ordered collection of gems, keyed by identity."""
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from app.models.gems import GemRecord, MapMarker

logger = logging.getLogger(__name__)

Snapshot = Tuple[GemRecord, ...]
Listener = Callable[[Snapshot], None]


class GemStore:
    """
    Owns the ordered sequence of gems.

    The sequence is an immutable tuple that is swapped in a single
    assignment, so observers only ever see a complete list. The only
    mutations are `load`, `prepend` and `apply_photo`; `image` is set-once
    per id, so replies arriving in any order converge on the same state.
    """

    def __init__(self) -> None:
        self._gems: Snapshot = ()
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._gems)

    def snapshot(self) -> Snapshot:
        return self._gems

    def get(self, gem_id: str) -> Optional[GemRecord]:
        for gem in self._gems:
            if gem.id == gem_id:
                return gem
        return None

    def load(self, records: Iterable[GemRecord]) -> None:
        """Replace the whole sequence."""
        self._publish(tuple(records))
        logger.info(f"Loaded {len(self._gems)} gems into store")

    def prepend(self, record: GemRecord) -> None:
        """Insert a new record at the head of the sequence."""
        self._publish((record,) + self._gems)

    def apply_photo(self, gem_id: str, url: Optional[str]) -> bool:
        """
        Set the image of `gem_id` unless it already has one.

        Unknown ids (e.g. removed by a reload while a lookup was in flight)
        and records that already carry an image are silent no-ops.

        Returns:
            True if the record was updated
        """
        if not url:
            return False

        for index, gem in enumerate(self._gems):
            if gem.id != gem_id:
                continue
            if gem.image:
                return False
            updated = gem.model_copy(update={"image": url})
            self._publish(self._gems[:index] + (updated,) + self._gems[index + 1:])
            return True

        logger.debug(f"Dropping photo for gem {gem_id}: no longer in store")
        return False

    def map_markers(self) -> List[MapMarker]:
        """Markers for every gem with numeric coordinates."""
        return [
            MapMarker(
                title=gem.name,
                lat=gem.lat,
                lng=gem.lng,
                description=gem.description,
                location=gem.address or "",
            )
            for gem in self._gems
            if gem.has_coordinates
        ]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with each new snapshot."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, gems: Snapshot) -> None:
        self._gems = gems
        for listener in list(self._listeners):
            listener(gems)


# Global instance
gem_store = GemStore()
