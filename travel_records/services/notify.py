from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

"""User-visible notifications with auto-dismiss.

Only one notification is shown at a time; a new one replaces the previous.
``current()`` stops returning a notification once its display interval is over.
"""

__all__ = [
    "Notification",
    "Notifier",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # info / error
    message: str
    created_at: datetime
    expires_at: datetime

    def is_active(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) < self.expires_at


class Notifier:
    def __init__(self, display_seconds: float = 4.0) -> None:
        self.display_seconds = display_seconds
        self._current: Notification | None = None

    def notify(self, message: str, level: str = "info", now: datetime | None = None) -> Notification:
        created = now or datetime.now(UTC)
        note = Notification(
            level=level,
            message=message,
            created_at=created,
            expires_at=created + timedelta(seconds=self.display_seconds),
        )
        self._current = note
        if level == "error":
            logger.error(message)
        else:
            logger.info(message)
        return note

    def current(self, now: datetime | None = None) -> Notification | None:
        if self._current is not None and not self._current.is_active(now):
            self._current = None  # auto-dismiss
        return self._current

    def dismiss(self) -> None:
        self._current = None
