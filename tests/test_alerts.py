"""Laundry alert scanning and the daily reminder."""

from datetime import datetime, timedelta

from logic.alerts import REMINDER_TITLE, ReminderMonitor, scan_laundry
from logic.laundry import move_to_laundry
from models.clothing import NotificationSettings
from tools.notifier import RecordingNotificationChannel


def test_item_left_six_days_raises_one_alert(make_item, now: datetime) -> None:
    wardrobe = [
        move_to_laundry(make_item("a", name="Linen shirt"), now - timedelta(days=6)),
        move_to_laundry(make_item("b"), now - timedelta(days=4)),
        make_item("c"),
    ]

    notifications = scan_laundry(wardrobe, now)

    assert len(notifications) == 1
    assert notifications[0].id == "laundry-a"
    assert notifications[0].item_id == "a"
    assert notifications[0].message == 'Your "Linen shirt" has been in the laundry for over 5 days!'


def test_threshold_is_strict(make_item, now: datetime) -> None:
    exactly = move_to_laundry(make_item("a"), now - timedelta(days=5))
    assert scan_laundry([exactly], now) == []
    assert scan_laundry([exactly], now + timedelta(seconds=1))[0].id == "laundry-a"


def test_scan_is_repeatable(make_item, now: datetime) -> None:
    wardrobe = [move_to_laundry(make_item("a"), now - timedelta(days=9))]
    assert scan_laundry(wardrobe, now) == scan_laundry(wardrobe, now)


def test_reminder_fires_once_per_minute() -> None:
    channel = RecordingNotificationChannel()
    monitor = ReminderMonitor(channel)
    settings = NotificationSettings(enabled=True, time="08:00")

    assert monitor.check(settings, datetime(2024, 1, 12, 8, 0, 5))
    assert not monitor.check(settings, datetime(2024, 1, 12, 8, 0, 50))
    assert not monitor.check(settings, datetime(2024, 1, 12, 8, 1))
    assert monitor.check(settings, datetime(2024, 1, 13, 8, 0))
    assert [title for title, _ in channel.sent] == [REMINDER_TITLE, REMINDER_TITLE]


def test_reminder_needs_enabled_settings_and_permission() -> None:
    at_eight = datetime(2024, 1, 12, 8, 0)
    denied = RecordingNotificationChannel(permission_granted=False)
    assert not ReminderMonitor(denied).check(NotificationSettings(enabled=True), at_eight)

    allowed = RecordingNotificationChannel()
    assert not ReminderMonitor(allowed).check(NotificationSettings(enabled=False), at_eight)
    assert allowed.sent == []

    assert denied.request_permission()
    assert ReminderMonitor(denied).check(NotificationSettings(enabled=True), at_eight)


class FlakyChannel(RecordingNotificationChannel):
    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures

    def send(self, title: str, body: str) -> None:
        if self.failures:
            self.failures -= 1
            raise OSError("notification daemon unavailable")
        super().send(title, body)


def test_failed_reminder_is_retried_within_the_minute() -> None:
    channel = FlakyChannel(failures=1)
    monitor = ReminderMonitor(channel)
    settings = NotificationSettings(enabled=True, time="08:00")

    assert not monitor.check(settings, datetime(2024, 1, 12, 8, 0, 5))
    assert monitor.check(settings, datetime(2024, 1, 12, 8, 0, 20))
    assert not monitor.check(settings, datetime(2024, 1, 12, 8, 0, 40))
    assert len(channel.sent) == 1
