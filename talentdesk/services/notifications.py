"""User-visible notifications (toasts).

Store failures, session load failures and route-guard denials are reported
to the user as transient notifications. They are queued here and drained by
the UI through ``GET /api/notifications``.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional

logger = logging.getLogger(__name__)


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "variant": self.variant.value,
            "created_at": self.created_at.isoformat(),
        }


class NotificationCenter:
    """
    Bounded queue of pending notifications.

    Oldest notifications are dropped once ``max_pending`` is reached, so a UI
    that never drains cannot grow the queue without limit.
    """

    def __init__(self, max_pending: int = 100):
        self._pending: Deque[Notification] = deque(maxlen=max_pending)

    def notify(
        self,
        title: str,
        description: str,
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self._pending.append(notification)
        logger.debug(f"Notification queued: {title}: {description}")
        return notification

    def error(self, description: str, title: str = "Error") -> Notification:
        return self.notify(title, description, NotificationVariant.DESTRUCTIVE)

    def success(self, description: str, title: str = "Success") -> Notification:
        return self.notify(title, description)

    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)

    def latest(self) -> Optional[Notification]:
        return self._pending[-1] if self._pending else None

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications."""
        drained = list(self._pending)
        self._pending.clear()
        return drained
