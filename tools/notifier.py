"""Notification channels for user-facing reminders."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

LOGGER = logging.getLogger(__name__)


class NotificationChannel(ABC):
    """A channel the user must allow once before anything is delivered."""

    def __init__(self, permission_granted: bool = False) -> None:
        self.permission_granted = permission_granted

    def request_permission(self) -> bool:
        """Ask once; the answer sticks for the lifetime of the channel."""

        if not self.permission_granted:
            self.permission_granted = self._prompt_permission()
        return self.permission_granted

    def _prompt_permission(self) -> bool:
        return True

    @abstractmethod
    def send(self, title: str, body: str) -> None:
        """Deliver one notification."""


class LogNotificationChannel(NotificationChannel):
    """Writes reminders to the application log."""

    def send(self, title: str, body: str) -> None:
        LOGGER.info("Notification", extra={"title": title, "body": body})


class RecordingNotificationChannel(NotificationChannel):
    """Keeps sent notifications in memory; used by tests and previews."""

    def __init__(self, permission_granted: bool = True) -> None:
        super().__init__(permission_granted=permission_granted)
        self.sent: List[Tuple[str, str]] = []

    def send(self, title: str, body: str) -> None:
        self.sent.append((title, body))


__all__ = ["NotificationChannel", "LogNotificationChannel", "RecordingNotificationChannel"]
