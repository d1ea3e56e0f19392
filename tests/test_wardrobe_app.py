"""Application root: startup reconciliation, plans, laundry and settings."""

from __future__ import annotations

import io
import threading
import time
import zipfile
from datetime import date, datetime, timedelta

import pytest

from logic.enrichment import AI_DISABLED, AI_DONE, AI_IGNORED, AI_PENDING, ItemDraft
from logic.validation import InventoryPayload, ItemPayload
from memory.collection_store import InMemoryCollectionStore
from models.clothing import (
    AppSettings,
    LaundryStatus,
    NotificationSettings,
    PlannedOutfit,
    WornLogEntry,
    item_to_dict,
    plan_to_dict,
)
from models.errors import (
    CategoryError,
    ConfirmationRequired,
    ItemValidationError,
    LaundryTransitionError,
    PastDateError,
    UnknownDraftError,
    UnknownItemError,
)
from tools.style_advisor import MockStyleAdvisor

PIXEL = "data:image/png;base64,iVBORw0KGgo="


def _seed(store: InMemoryCollectionStore, items, plans=None) -> None:
    store.set("wardrobe", [item_to_dict(item) for item in items])
    if plans:
        store.set("plannedOutfits", {key: plan_to_dict(plan) for key, plan in plans.items()})


def test_startup_reconciles_past_plans(build_app, memory_store, make_item, now) -> None:
    _seed(
        memory_store,
        [make_item("A"), make_item("B")],
        {"2024-01-10": PlannedOutfit(["A", "B"]), "2024-01-13": PlannedOutfit(["A"])},
    )

    app = build_app()

    assert app.last_reconcile.migrated_dates == ["2024-01-10"]
    assert [entry.item_id for entry in app.state.wear_log] == ["A", "B"]
    assert all(item.status is LaundryStatus.IN_LAUNDRY for item in app.list_items())
    assert set(app.state.plans) == {"2024-01-10", "2024-01-13"}
    assert memory_store.get("wearLog")[0]["itemId"] == "A"

    writes = memory_store.write_count
    again = build_app()
    assert not again.last_reconcile.changed
    assert memory_store.write_count == writes


def test_startup_without_past_plans_writes_nothing(build_app, memory_store, make_item) -> None:
    _seed(memory_store, [make_item("A")], {"2024-01-12": PlannedOutfit(["A"])})
    writes = memory_store.write_count

    build_app()

    assert memory_store.write_count == writes


def test_day_view_switches_source_at_today(build_app, memory_store, make_item) -> None:
    _seed(memory_store, [make_item("A"), make_item("B")], {"2024-01-10": PlannedOutfit(["A"], "interview")})
    app = build_app()
    app.save_plan("2024-01-12", ["B"])

    past = app.day_view("2024-01-10")
    assert past.source == "wear_log" and [item.item_id for item in past.items] == ["A"]
    assert past.note == "interview"
    assert [item.item_id for item in app.day_view().items] == ["B"]
    assert app.active_days() == ["2024-01-10", "2024-01-12"]


def test_save_plan_rules(build_app, memory_store, make_item) -> None:
    _seed(memory_store, [make_item("A"), make_item("W", ironing_status="Needs Ironing"), make_item("L")])
    app = build_app()
    app.move_to_laundry("L")

    with pytest.raises(PastDateError):
        app.save_plan("2024-01-11", ["A"])
    with pytest.raises(ValueError):
        app.save_plan("tomorrow", ["A"])
    with pytest.raises(ItemValidationError):
        app.save_plan("2024-01-13", [])
    with pytest.raises(ItemValidationError):
        app.save_plan("2024-01-13", ["L"])
    with pytest.raises(UnknownItemError):
        app.save_plan("2024-01-13", ["ghost"])
    with pytest.raises(ConfirmationRequired) as excinfo:
        app.save_plan("2024-01-13", ["A", "W"])
    assert excinfo.value.item_ids == ["W"]
    assert app.state.plans == {}

    plan = app.save_plan("2024-01-13", ["A", "W"], note="dinner", confirmed_ids=["W"])
    assert plan == PlannedOutfit(["A", "W"], "dinner")

    # Already planned items stay even once they are no longer available.
    app.move_to_laundry("A")
    assert app.save_plan("2024-01-13", ["A", "W"]).item_ids == ["A", "W"]


def test_planner_session_saves_through_the_app(build_app, memory_store, make_item) -> None:
    _seed(memory_store, [make_item("A"), make_item("W", ironing_status="Needs Ironing")])
    app = build_app()

    session = app.plan_to_wear("W")
    session.confirm()
    session.toggle("A")
    app.save_session(session)

    assert app.state.plans["2024-01-13"].item_ids == ["W", "A"]
    assert app.open_planner("2024-01-13").selected_ids == ["W", "A"]


def test_log_wear_moves_available_item_to_laundry(build_app, memory_store, make_item, now) -> None:
    _seed(memory_store, [make_item("A"), make_item("B")])
    app = build_app()
    app.move_to_laundry("B")

    entry = app.log_wear("A", date(2024, 1, 11))
    app.log_wear("B", "2024-01-12")

    assert entry == WornLogEntry("A", datetime(2024, 1, 11, 12))
    worn = app.get_item("A")
    assert worn.status is LaundryStatus.IN_LAUNDRY and worn.needs_ironing
    assert worn.added_to_laundry_at == now
    assert [entry.item_id for entry in app.state.wear_log] == ["A", "B"]
    with pytest.raises(UnknownItemError):
        app.log_wear("ghost")
    assert len(app.state.wear_log) == 2


def test_laundry_flow_and_alerts(build_app, memory_store, make_item, clock) -> None:
    _seed(memory_store, [make_item("W", "Whites"), make_item("T", "Top")])
    app = build_app()
    app.move_to_laundry("W")
    app.move_to_laundry("T")
    assert app.laundry_notifications == []

    clock.now += timedelta(days=6)
    assert [note.id for note in app.refresh_laundry_notifications()] == ["laundry-W", "laundry-T"]

    assert app.mark_all_washed(["Whites"]) == ["W"]
    assert [note.id for note in app.laundry_notifications] == ["laundry-T"]
    assert [group.name for group in app.laundry_groups()] == ["Other"]

    with pytest.raises(LaundryTransitionError):
        app.put_away("T")
    assert app.put_away("W").status is LaundryStatus.AVAILABLE
    assert app.toggle_ironing("W").needs_ironing
    assert not app.set_ironing("W", "Ironed").needs_ironing


def test_items_crud(build_app, make_item) -> None:
    app = build_app()
    created = app.add_item_from_payload(
        ItemPayload(name="Oxford shirt", category="top", imageUrl=PIXEL, occasions=["Work"])
    )
    assert created.category == "Top"
    assert created.dominant_color == "#808080"

    app.move_to_laundry(created.item_id)
    edited = app.update_item(created.item_id, ItemPayload(name="Oxford", category="Top", imageUrl=PIXEL))
    assert edited.name == "Oxford"
    assert edited.status is LaundryStatus.IN_LAUNDRY
    assert edited.added_to_laundry_at is not None

    with pytest.raises(ItemValidationError):
        app.add_item_from_payload(ItemPayload(name="", imageUrl=PIXEL))
    with pytest.raises(ItemValidationError):
        app.add_item_from_payload(ItemPayload(name="Hat", category="Hats", imageUrl=PIXEL))

    app.delete_item(created.item_id)
    assert app.list_items() == []
    with pytest.raises(UnknownItemError):
        app.delete_item(created.item_id)


def test_import_archive_creates_drafts_for_review(build_app) -> None:
    app = build_app()
    app.update_app_settings(AppSettings(ai_features_enabled=False))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("blue_jeans.png", b"png")
        archive.writestr("white-tee.jpg", b"jpg")

    drafts = app.import_archive(buffer.getvalue())

    assert [draft.name for draft in drafts] == ["blue jeans", "white tee"]
    assert all(draft.ai_status["category"] == AI_DISABLED for draft in drafts)
    assert app.list_drafts() == drafts
    drafts[0].edit("category", "Bottom")
    saved = app.add_items(drafts)
    assert [item.category for item in saved] == ["Bottom", "Top"]

    with pytest.raises(ItemValidationError):
        app.add_items([drafts[0], ItemDraft.blank(app.state.categories)])
    assert len(app.list_items()) == 2


class GatedAdvisor(MockStyleAdvisor):
    """Holds category lookups until the test releases them."""

    def __init__(self) -> None:
        self.release = threading.Event()

    def categorize_image(self, image: str, categories) -> str:
        self.release.wait(5)
        return "Outerwear"


def _wait_for_enrichment(draft: ItemDraft) -> None:
    deadline = time.monotonic() + 5
    while AI_PENDING in draft.ai_status.values() and time.monotonic() < deadline:
        time.sleep(0.01)


def test_draft_edits_survive_late_ai_results(build_app) -> None:
    advisor = GatedAdvisor()
    app = build_app(advisor=advisor)

    draft = app.new_draft(PIXEL, name="Linen shirt")
    assert app.list_drafts() == [draft]
    app.edit_draft(draft.draft_id, {"category": "Bottom"})
    advisor.release.set()
    _wait_for_enrichment(draft)

    assert draft.category == "Bottom"
    assert draft.ai_status == {"category": AI_IGNORED, "dominant_color": AI_DONE}

    saved = app.save_drafts([draft.draft_id])
    assert [item.category for item in saved] == ["Bottom"]
    assert app.list_drafts() == []
    with pytest.raises(UnknownDraftError):
        app.get_draft(draft.draft_id)


def test_saving_drafts_is_all_or_nothing(build_app) -> None:
    app = build_app()
    app.update_app_settings(AppSettings(ai_features_enabled=False))
    good = app.new_draft(PIXEL, name="Tee")
    nameless = app.new_draft(PIXEL)

    with pytest.raises(ItemValidationError):
        app.save_drafts([good.draft_id, nameless.draft_id])
    with pytest.raises(UnknownDraftError):
        app.save_drafts([good.draft_id, "missing"])
    assert app.list_items() == []
    assert len(app.list_drafts()) == 2

    app.discard_draft(nameless.draft_id)
    assert [item.name for item in app.save_drafts([good.draft_id])] == ["Tee"]


def test_categories_and_settings(build_app, channel) -> None:
    app = build_app()

    assert app.add_category("Scarves")[-1] == "Scarves"
    with pytest.raises(CategoryError):
        app.add_category("scarves")
    assert "Whites" not in app.delete_category("whites")

    channel.permission_granted = False
    app.update_notification_settings(NotificationSettings(enabled=True, time="09:30"))
    assert channel.permission_granted
    assert app.check_reminder()
    assert not app.check_reminder()

    app.complete_onboarding()
    assert app.state.onboarding_complete


def test_suggestion_and_insights(build_app, memory_store, make_item) -> None:
    _seed(memory_store, [make_item("T", "Top"), make_item("B", "Bottom")])
    app = build_app()
    app.log_wear("T", "2024-01-11")

    suggestion = app.suggest_outfit("Weekend")
    assert list(suggestion.items) == ["bottom"]

    ranked = app.insights()
    assert [(entry.item.item_id, entry.count) for entry in ranked] == [("T", 1)]


def test_inventory_crud(build_app) -> None:
    app = build_app()
    stored = app.add_inventory_item(
        InventoryPayload(name="Passport", category="Documents", location={"storage": "Desk", "container": "Drawer"})
    )
    assert stored.location.label() == "Desk > Drawer"

    updated = app.update_inventory_item(stored.item_id, InventoryPayload(name="Passport", notes="renew 2026"))
    assert updated.notes == "renew 2026"
    assert updated.location is None

    with pytest.raises(ItemValidationError):
        app.add_inventory_item(InventoryPayload(name=" "))
    app.delete_inventory_item(stored.item_id)
    with pytest.raises(UnknownItemError):
        app.delete_inventory_item(stored.item_id)


def test_reminder_timer_follows_notification_settings(build_app) -> None:
    app = build_app()
    app.start_background_tasks()
    assert app._reminder_timer is None

    app.update_notification_settings(NotificationSettings(enabled=True, time="08:00"))
    assert app._reminder_timer is not None and app._reminder_timer.running

    app.update_notification_settings(NotificationSettings(enabled=False))
    assert app._reminder_timer is None

    app.shutdown()
    assert app._alert_timer is None


def test_app_starts_with_a_malformed_stored_item(build_app, memory_store, make_item) -> None:
    memory_store.set(
        "wardrobe",
        [item_to_dict(make_item("A")), {"id": "B", "name": "Belt", "category": "Accessory", "dominantColor": "red"}],
    )

    app = build_app()

    assert [item.item_id for item in app.list_items()] == ["A", "B"]
    assert app.get_item("B").dominant_color is None
