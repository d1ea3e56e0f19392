"""Collection stores and the typed wardrobe state on top of them."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from logic.laundry import move_to_laundry
from memory.collection_store import (
    InMemoryCollectionStore,
    JSONCollectionStore,
    SQLiteCollectionStore,
    build_collection_store,
)
from memory.wardrobe_state import WardrobeState
from models.categories import DEFAULT_CATEGORIES
from models.clothing import AppSettings, LaundryStatus, NotificationSettings, PlannedOutfit, WornLogEntry


@pytest.mark.parametrize("backend", ["json", "sqlite"])
def test_file_backends_survive_reopen(tmp_path: Path, backend: str) -> None:
    path = tmp_path / ("wardrobe.json" if backend == "json" else "wardrobe.db")
    store = build_collection_store(backend, str(path))
    store.set("wardrobe", [{"id": "a", "name": "Shirt"}])
    store.set("isOnboardingComplete", True)

    reopened = JSONCollectionStore(path) if backend == "json" else SQLiteCollectionStore(path)

    assert reopened.get("wardrobe") == [{"id": "a", "name": "Shirt"}]
    assert reopened.get("isOnboardingComplete") is True
    assert reopened.get("missing", []) == []
    assert sorted(reopened.keys()) == ["isOnboardingComplete", "wardrobe"]


def test_memory_store_hands_out_copies() -> None:
    store = InMemoryCollectionStore()
    value = {"itemIds": ["a"]}
    store.set("plannedOutfits", value)
    value["itemIds"].append("b")

    fetched = store.get("plannedOutfits")
    fetched["itemIds"].append("c")

    assert store.get("plannedOutfits") == {"itemIds": ["a"]}
    assert store.write_count == 1


def test_state_round_trips_every_collection(tmp_path: Path, make_item) -> None:
    stamp = datetime(2024, 1, 10, 8, 15)
    store = JSONCollectionStore(tmp_path / "wardrobe.json")
    state = WardrobeState(store)

    state.replace_wardrobe([move_to_laundry(make_item("a", occasions=["Work"]), stamp), make_item("b")])
    state.replace_wear_log([WornLogEntry("a", datetime(2024, 1, 9, 12))])
    state.replace_plans({"2024-01-15": PlannedOutfit(["b"], "gym")})
    state.replace_categories([*DEFAULT_CATEGORIES, "Scarves"])
    state.replace_app_settings(AppSettings(ai_features_enabled=False, theme="dark"))
    state.replace_notification_settings(NotificationSettings(enabled=True, time="21:30"))
    state.set_onboarding_complete()

    reloaded = WardrobeState(JSONCollectionStore(tmp_path / "wardrobe.json"))

    assert reloaded.wardrobe == state.wardrobe
    assert reloaded.wear_log == state.wear_log
    assert reloaded.plans == {"2024-01-15": PlannedOutfit(["b"], "gym")}
    assert reloaded.categories[-1] == "Scarves"
    assert reloaded.app_settings == AppSettings(ai_features_enabled=False, theme="dark")
    assert reloaded.notification_settings.time == "21:30"
    assert reloaded.onboarding_complete


def test_persisted_layout_uses_camel_case_and_millis(make_item) -> None:
    store = InMemoryCollectionStore()
    state = WardrobeState(store)

    state.replace_wardrobe([move_to_laundry(make_item("a"), datetime(2024, 1, 10, 8, 15))])
    state.replace_plans({"2024-01-15": PlannedOutfit(["a"])})

    raw_item = store.get("wardrobe")[0]
    assert raw_item["status"] == "In Laundry"
    assert isinstance(raw_item["addedToLaundryAt"], int)
    assert raw_item["ironingStatus"] == "Ironed"
    assert store.get("plannedOutfits") == {"2024-01-15": {"itemIds": ["a"]}}


def test_laundry_item_without_timestamp_is_repaired_on_load() -> None:
    store = InMemoryCollectionStore(
        {"wardrobe": [{"id": "a", "name": "Shirt", "category": "Top", "status": "In Laundry"}]}
    )

    item = WardrobeState(store).wardrobe[0]

    assert item.status is LaundryStatus.IN_LAUNDRY
    assert item.added_to_laundry_at is not None


def test_empty_store_defaults() -> None:
    state = WardrobeState(InMemoryCollectionStore())

    assert state.categories == DEFAULT_CATEGORIES
    assert state.app_settings == AppSettings()
    assert state.notification_settings == NotificationSettings()
    assert not state.onboarding_complete
    assert state.wardrobe == [] and state.plans == {}


def test_unreadable_records_do_not_block_loading() -> None:
    store = InMemoryCollectionStore(
        {
            "wardrobe": [
                {"id": "a", "name": "Shirt", "category": "Top", "dominantColor": "red"},
                {"id": "b", "name": "Scarf", "category": "Accessory", "status": "Folded"},
                {"id": "c", "name": "Jeans", "category": "Bottom"},
            ],
            "wearLog": [{"itemId": "c", "date": None}, {"itemId": "c", "date": 1704970800000}],
            "notificationSettings": {"enabled": True, "time": "7am"},
        }
    )

    state = WardrobeState(store)

    assert [item.item_id for item in state.wardrobe] == ["a", "c"]
    assert state.wardrobe[0].dominant_color is None
    assert [entry.item_id for entry in state.wear_log] == ["c"]
    assert state.notification_settings == NotificationSettings()
