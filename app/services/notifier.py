"""User-visible notifications (the toasts shown by the UI)."""
import itertools
import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Notification severities."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """A single message for the user."""
    level: NotificationLevel
    message: str
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class Notifier:
    """
    Bounded queues of notifications waiting to be shown, one per recipient.

    A recipient is the caller's session key (see `AuthSession.notification_key`).
    Notifications pushed without a recipient, such as a failed list refresh,
    are shared: the first reader receives them along with its own.
    """

    def __init__(self, max_pending: int = 50):
        self.max_pending = max_pending
        self._queues: Dict[Optional[str], Deque[Tuple[int, Notification]]] = {}
        self._sequence = itertools.count()

    def error(self, message: str, recipient: Optional[str] = None) -> None:
        self._push(NotificationLevel.ERROR, message, recipient)

    def success(self, message: str, recipient: Optional[str] = None) -> None:
        self._push(NotificationLevel.SUCCESS, message, recipient)

    def info(self, message: str, recipient: Optional[str] = None) -> None:
        self._push(NotificationLevel.INFO, message, recipient)

    def pending(self, recipient: Optional[str] = None) -> List[Notification]:
        """Shared and `recipient`'s notifications; every queue when no recipient is given."""
        return self._collect(recipient, clear=False)

    def drain(self, recipient: Optional[str] = None) -> List[Notification]:
        """Return and clear what `pending` would return."""
        return self._collect(recipient, clear=True)

    def _collect(self, recipient: Optional[str], clear: bool) -> List[Notification]:
        if recipient is None:
            keys = list(self._queues)
        else:
            keys = [key for key in (None, recipient) if key in self._queues]

        collected: List[Tuple[int, Notification]] = []
        for key in keys:
            collected.extend(self._queues[key])
            if clear:
                del self._queues[key]
        return [note for _, note in sorted(collected, key=lambda entry: entry[0])]

    def _push(self, level: NotificationLevel, message: str, recipient: Optional[str]) -> None:
        logger.debug(f"Notify [{level.value}] {recipient or 'everyone'}: {message}")
        queue = self._queues.get(recipient)
        if queue is None:
            queue = self._queues[recipient] = deque(maxlen=self.max_pending)
        queue.append((next(self._sequence), Notification(level=level, message=message)))


# Global instance
notifier = Notifier()
