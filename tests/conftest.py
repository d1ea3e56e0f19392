"""Shared fixtures: a fixed clock, an in-memory store and item builders."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import pytest

from memory.collection_store import InMemoryCollectionStore
from models.clothing import ClothingItem
from tools.notifier import RecordingNotificationChannel
from tools.style_advisor import MockStyleAdvisor
from wardrobe_app.app import WardrobeApp
from wardrobe_app.config import AppConfig

NOW = datetime(2024, 1, 12, 9, 30)
PIXEL = "data:image/png;base64,iVBORw0KGgo="


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_item() -> Callable[..., ClothingItem]:
    def _make(item_id: str, category: str = "Top", **overrides) -> ClothingItem:
        fields = {
            "item_id": item_id,
            "name": overrides.pop("name", f"Item {item_id}"),
            "category": category,
            "image_url": PIXEL,
        }
        fields.update(overrides)
        return ClothingItem(**fields)

    return _make


@pytest.fixture
def memory_store() -> InMemoryCollectionStore:
    return InMemoryCollectionStore()


@pytest.fixture
def channel() -> RecordingNotificationChannel:
    return RecordingNotificationChannel()


@pytest.fixture
def build_app(memory_store, clock, channel) -> Callable[..., WardrobeApp]:
    """Factory so tests can seed the store before the app reconciles."""

    created = []

    def _build(**overrides) -> WardrobeApp:
        kwargs = {
            "config": AppConfig(storage_backend="memory"),
            "store": memory_store,
            "advisor": MockStyleAdvisor(),
            "channel": channel,
            "clock": clock,
        }
        kwargs.update(overrides)
        app = WardrobeApp(**kwargs)
        created.append(app)
        return app

    yield _build
    for app in created:
        app.shutdown()
