"""Laundry overdue alerts and the daily planning reminder."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from wardrobe_app.logging_config import get_logger, log_event
from models.clothing import ClothingItem, LaundryNotification, LaundryStatus, NotificationSettings
from tools.notifier import NotificationChannel

LOGGER = get_logger(__name__)

LAUNDRY_ALERT_THRESHOLD = timedelta(days=5)
REMINDER_TITLE = "Outfit Planner Reminder"
REMINDER_BODY = "Don't forget to plan your outfit for tomorrow!"


def laundry_notification_id(item_id: str) -> str:
    return f"laundry-{item_id}"


def scan_laundry(
    wardrobe: Iterable[ClothingItem],
    now: datetime,
    threshold: timedelta = LAUNDRY_ALERT_THRESHOLD,
) -> List[LaundryNotification]:
    """Flag every item that has been in the laundry longer than ``threshold``.

    Pure: the same wardrobe and ``now`` always give the same notifications,
    with ids stable across scans.
    """

    span = f"{threshold.days} days" if threshold.days else str(threshold)
    notifications: List[LaundryNotification] = []
    for item in wardrobe:
        if item.status is not LaundryStatus.IN_LAUNDRY or item.added_to_laundry_at is None:
            continue
        if now - item.added_to_laundry_at > threshold:
            notifications.append(
                LaundryNotification(
                    id=laundry_notification_id(item.item_id),
                    message=f'Your "{item.name}" has been in the laundry for over {span}!',
                    item_id=item.item_id,
                )
            )
    return notifications


class ReminderMonitor:
    """Fires the planning reminder at most once for each matching minute."""

    def __init__(self, channel: NotificationChannel) -> None:
        self.channel = channel
        self._last_fired: Optional[str] = None
        self._lock = threading.Lock()

    def check(self, settings: NotificationSettings, now: datetime) -> bool:
        if not settings.enabled or not self.channel.permission_granted:
            return False
        if now.strftime("%H:%M") != settings.time:
            return False

        minute_key = now.strftime("%Y-%m-%dT%H:%M")
        with self._lock:
            if self._last_fired == minute_key:
                return False
            try:
                self.channel.send(REMINDER_TITLE, REMINDER_BODY)
            except Exception as exc:
                log_event(LOGGER, logging.WARNING, "reminder_send_failed", minute=minute_key, error=str(exc))
                return False
            self._last_fired = minute_key
        log_event(LOGGER, logging.INFO, "reminder_sent", minute=minute_key)
        return True


__all__ = [
    "LAUNDRY_ALERT_THRESHOLD",
    "ReminderMonitor",
    "laundry_notification_id",
    "scan_laundry",
]
