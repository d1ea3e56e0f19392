"""Application root: owns the collections, the advisor and the background timers."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from agents.item_enrichment import ItemEnrichmentAgent
from agents.outfit_helper import OutfitHelperAgent, ResolvedSuggestion
from logic import laundry
from logic.alerts import ReminderMonitor, scan_laundry
from logic.date_keys import is_past, parse_date_key, to_date_key, today_key, worn_at_noon
from logic.enrichment import ItemDraft
from logic.insights import WearCount, rank_wear_frequency
from logic.laundry import LaundryGroup, group_laundry
from logic.planner import DayView, PlannerSession, active_days, resolve_day, save_plan
from logic.reconciler import ReconcileResult, reconcile_past_plans
from logic.validation import InventoryPayload, ItemPayload
from memory.collection_store import CollectionStore, build_collection_store
from memory.wardrobe_state import WardrobeState
from models import categories as category_rules
from models.clothing import (
    AppSettings,
    ClothingItem,
    InventoryItem,
    IroningStatus,
    LaundryNotification,
    NotificationSettings,
    PlannedOutfit,
    WornLogEntry,
    index_by_id,
)
from models.errors import (
    ConfirmationRequired,
    ItemValidationError,
    PastDateError,
    UnknownDraftError,
    UnknownItemError,
)
from tools.archive_import import ArchiveSource, read_image_archive
from tools.notifier import LogNotificationChannel, NotificationChannel
from tools.observability import instrument_tool
from tools.style_advisor import StyleAdvisor, build_style_advisor
from tools.timers import RepeatingTimer
from wardrobe_app.config import AppConfig
from wardrobe_app.logging_config import configure_logging, get_logger, log_event, operation_context

LOGGER = get_logger(__name__)

Clock = Callable[[], datetime]


def _draft_from_payload(payload: ItemPayload, categories: Sequence[str]) -> ItemDraft:
    draft = ItemDraft.blank(categories)
    draft.name = payload.name
    draft.image_url = payload.image_url
    draft.category = payload.category or draft.category
    draft.occasions = list(payload.occasions)
    draft.location = payload.location.model_dump(by_alias=True) if payload.location else None
    draft.laundry_instructions = payload.laundry_instructions
    if payload.ironing_status:
        draft.ironing_status = payload.ironing_status
    if payload.dominant_color:
        draft.dominant_color = payload.dominant_color
    return draft


class WardrobeApp:
    """Wires together storage, the planner, laundry, alerts and the AI agents.

    Every mutation runs under ``state.lock`` and replaces whole collections,
    so the timer threads only ever see complete snapshots.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        store: CollectionStore | None = None,
        advisor: StyleAdvisor | None = None,
        channel: NotificationChannel | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()
        self.clock: Clock = clock or datetime.now

        self.store = store or build_collection_store(
            self.config.storage_backend, self.config.default_storage_path()
        )
        self.state = WardrobeState(self.store)
        self.advisor = advisor or build_style_advisor(
            self.config.api_key, self.config.model, self.config.ai_timeout_seconds
        )
        self.outfit_helper = OutfitHelperAgent(self.advisor)
        self.enrichment_agent = ItemEnrichmentAgent(self.advisor)
        self.channel = channel or LogNotificationChannel()
        self.reminder_monitor = ReminderMonitor(self.channel)
        self.laundry_threshold = timedelta(days=self.config.laundry_alert_days)

        self._drafts: Dict[str, ItemDraft] = {}
        self._laundry_notifications: List[LaundryNotification] = []
        self._alert_timer: Optional[RepeatingTimer] = None
        self._reminder_timer: Optional[RepeatingTimer] = None
        self._background_running = False

        self.last_reconcile = self.reconcile()

    # ------------------------------------------------------------------
    # Startup and background work
    # ------------------------------------------------------------------
    def today(self) -> str:
        return today_key(self.clock())

    def reconcile(self) -> ReconcileResult:
        """Move past plans into the wear log; writes only when something moved."""

        with operation_context("app:reconcile"), self.state.lock:
            result = reconcile_past_plans(
                self.state.plans, self.state.wear_log, self.state.wardrobe, self.clock()
            )
            if result.changed:
                self.state.replace_wear_log(result.wear_log)
                self.state.replace_wardrobe(result.wardrobe)
            self.refresh_laundry_notifications()
        return result

    def refresh_laundry_notifications(self) -> List[LaundryNotification]:
        notifications = scan_laundry(self.state.wardrobe, self.clock(), self.laundry_threshold)
        self._laundry_notifications = notifications
        if notifications:
            log_event(LOGGER, logging.INFO, "laundry_alerts", count=len(notifications))
        return list(notifications)

    @property
    def laundry_notifications(self) -> List[LaundryNotification]:
        return list(self._laundry_notifications)

    def check_reminder(self) -> bool:
        return self.reminder_monitor.check(self.state.notification_settings, self.clock())

    def request_notification_permission(self) -> bool:
        return self.channel.request_permission()

    def start_background_tasks(self) -> None:
        self._background_running = True
        if self._alert_timer is None:
            self._alert_timer = RepeatingTimer(
                "laundry-alerts", self.config.alert_interval_seconds, self.refresh_laundry_notifications
            )
            self._alert_timer.start()
        self._restart_reminder_timer()

    def _restart_reminder_timer(self) -> None:
        if self._reminder_timer is not None:
            self._reminder_timer.cancel()
            self._reminder_timer = None
        if self._background_running and self.state.notification_settings.enabled:
            self._reminder_timer = RepeatingTimer(
                "outfit-reminder", self.config.reminder_interval_seconds, self.check_reminder
            )
            self._reminder_timer.start()

    def shutdown(self) -> None:
        self._background_running = False
        for timer in (self._alert_timer, self._reminder_timer):
            if timer is not None:
                timer.cancel()
        self._alert_timer = None
        self._reminder_timer = None
        self.enrichment_agent.shutdown()
        log_event(LOGGER, logging.INFO, "app_shutdown")

    # ------------------------------------------------------------------
    # Wardrobe items
    # ------------------------------------------------------------------
    def list_items(self) -> List[ClothingItem]:
        return self.state.wardrobe

    def get_item(self, item_id: str) -> ClothingItem:
        item = index_by_id(self.state.wardrobe).get(item_id)
        if item is None:
            raise UnknownItemError(item_id)
        return item

    def _commit_wardrobe(self, items: Sequence[ClothingItem]) -> None:
        self.state.replace_wardrobe(items)
        self.refresh_laundry_notifications()

    def _open_draft(self, draft: ItemDraft) -> ItemDraft:
        with self.state.lock:
            self._drafts[draft.draft_id] = draft
        self.enrichment_agent.enrich_in_background(
            draft, self.state.categories, enabled=self.state.app_settings.ai_features_enabled
        )
        return draft

    def new_draft(self, image_url: str, name: str = "") -> ItemDraft:
        """Start an item form from a photo; AI lookups run in the background when enabled."""

        draft = ItemDraft.blank(self.state.categories)
        draft.image_url = image_url
        draft.name = name
        return self._open_draft(draft)

    def list_drafts(self) -> List[ItemDraft]:
        with self.state.lock:
            return list(self._drafts.values())

    def get_draft(self, draft_id: str) -> ItemDraft:
        with self.state.lock:
            draft = self._drafts.get(draft_id)
        if draft is None:
            raise UnknownDraftError(draft_id)
        return draft

    def edit_draft(self, draft_id: str, changes: Mapping[str, Any]) -> ItemDraft:
        """Apply user edits; an edited field keeps its value when AI results land."""

        draft = self.get_draft(draft_id)
        for field_name, value in changes.items():
            draft.edit(field_name, value)
        return draft

    def discard_draft(self, draft_id: str) -> None:
        with self.state.lock:
            if self._drafts.pop(draft_id, None) is None:
                raise UnknownDraftError(draft_id)

    @instrument_tool("save_drafts")
    def save_drafts(self, draft_ids: Sequence[str]) -> List[ClothingItem]:
        """Save open drafts as items and close them; nothing is saved if one is invalid."""

        with self.state.lock:
            drafts = [self.get_draft(draft_id) for draft_id in dict.fromkeys(draft_ids)]
            items = self.add_items(drafts)
            for draft in drafts:
                self._drafts.pop(draft.draft_id, None)
        return items

    @instrument_tool("add_item")
    def add_item(self, draft: ItemDraft) -> ClothingItem:
        with self.state.lock:
            item = draft.to_item(self.state.categories)
            self._commit_wardrobe([*self.state.wardrobe, item])
        log_event(LOGGER, logging.INFO, "item_added", item_id=item.item_id, category=item.category)
        return item

    def add_item_from_payload(self, payload: ItemPayload) -> ClothingItem:
        return self.add_item(_draft_from_payload(payload, self.state.categories))

    @instrument_tool("add_items")
    def add_items(self, drafts: Sequence[ItemDraft]) -> List[ClothingItem]:
        """Save several drafts at once; one invalid draft saves none of them."""

        with self.state.lock:
            categories = self.state.categories
            items = [draft.to_item(categories) for draft in drafts]
            self._commit_wardrobe([*self.state.wardrobe, *items])
        return items

    @instrument_tool("update_item")
    def update_item(self, item_id: str, payload: ItemPayload) -> ClothingItem:
        """Edit descriptive fields; laundry state is not changed by an edit."""

        with self.state.lock:
            wardrobe = self.state.wardrobe
            current = self.get_item(item_id)
            draft = _draft_from_payload(payload, self.state.categories)
            if not payload.ironing_status:
                draft.ironing_status = current.ironing_status
            if not payload.dominant_color:
                draft.dominant_color = current.dominant_color
            edited = replace(
                draft.to_item(self.state.categories, item_id=item_id),
                status=current.status,
                added_to_laundry_at=current.added_to_laundry_at,
            )
            self._commit_wardrobe([edited if item.item_id == item_id else item for item in wardrobe])
        return edited

    @instrument_tool("delete_item")
    def delete_item(self, item_id: str) -> None:
        """Remove an item; plans and wear history keep referencing its id."""

        with self.state.lock:
            wardrobe = self.state.wardrobe
            if item_id not in index_by_id(wardrobe):
                raise UnknownItemError(item_id)
            self._commit_wardrobe([item for item in wardrobe if item.item_id != item_id])

    def import_archive(self, source: ArchiveSource) -> List[ItemDraft]:
        """Turn every image in a zip archive into a draft awaiting review."""

        unprocessed = read_image_archive(source)
        categories = self.state.categories
        drafts = [
            self._open_draft(ItemDraft.from_upload(entry.original_name, entry.image_url, categories))
            for entry in unprocessed
        ]
        log_event(LOGGER, logging.INFO, "archive_imported", drafts=len(drafts))
        return drafts

    # ------------------------------------------------------------------
    # Laundry
    # ------------------------------------------------------------------
    def _transition(self, item_id: str, change: Callable[[ClothingItem], ClothingItem]) -> ClothingItem:
        with self.state.lock:
            wardrobe = self.state.wardrobe
            current = self.get_item(item_id)
            updated = change(current)
            self._commit_wardrobe([updated if item.item_id == item_id else item for item in wardrobe])
        log_event(
            LOGGER,
            logging.INFO,
            "item_transitioned",
            item_id=item_id,
            status=updated.status.value,
            ironing=updated.ironing_status.value,
        )
        return updated

    @instrument_tool("move_to_laundry")
    def move_to_laundry(self, item_id: str) -> ClothingItem:
        return self._transition(item_id, lambda item: laundry.move_to_laundry(item, self.clock()))

    @instrument_tool("mark_washed")
    def mark_item_washed(self, item_id: str) -> ClothingItem:
        return self._transition(item_id, laundry.mark_washed)

    @instrument_tool("put_away")
    def put_away(self, item_id: str) -> ClothingItem:
        return self._transition(item_id, laundry.put_away)

    def set_ironing(self, item_id: str, status: IroningStatus | str) -> ClothingItem:
        return self._transition(item_id, lambda item: laundry.set_ironing(item, status))

    def toggle_ironing(self, item_id: str) -> ClothingItem:
        return self._transition(item_id, laundry.toggle_ironing)

    @instrument_tool("mark_all_washed")
    def mark_all_washed(self, categories: Optional[Iterable[str]] = None) -> List[str]:
        with self.state.lock:
            updated, changed = laundry.mark_all_washed(self.state.wardrobe, categories)
            if changed:
                self._commit_wardrobe(updated)
        return changed

    def laundry_groups(self) -> List[LaundryGroup]:
        return group_laundry(self.state.wardrobe)

    @instrument_tool("log_wear")
    def log_wear(self, item_id: str, worn_on: date | str | None = None) -> WornLogEntry:
        """Record that an item was worn on a day (today by default)."""

        key = worn_on if isinstance(worn_on, str) else to_date_key(worn_on or self.clock())
        entry = WornLogEntry(item_id=item_id, worn_at=worn_at_noon(key))
        with self.state.lock:
            item = self.get_item(item_id)
            self.state.replace_wear_log([*self.state.wear_log, entry])
            if item.is_available:
                self._transition(item_id, lambda current: laundry.move_to_laundry(current, self.clock(), via_wear=True))
        return entry

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------
    def open_planner(self, date_key: Optional[str] = None) -> PlannerSession:
        today = self.today()
        return PlannerSession(date_key or today, today, self.state.wardrobe, self.state.plans)

    def plan_to_wear(self, item_id: str) -> PlannerSession:
        return PlannerSession.plan_to_wear(
            self.get_item(item_id), self.today(), self.state.wardrobe, self.state.plans
        )

    def save_session(self, session: PlannerSession) -> PlannedOutfit:
        plan = session.to_plan()
        return self.save_plan(session.date_key, plan.item_ids, plan.note, confirmed_ids=plan.item_ids)

    @instrument_tool("save_plan")
    def save_plan(
        self,
        date_key: str,
        item_ids: Sequence[str],
        note: Optional[str] = None,
        confirmed_ids: Sequence[str] = (),
    ) -> PlannedOutfit:
        """Overwrite the plan for ``date_key``.

        Items already in the saved plan are kept as they are. Newly added
        items must be available, and those needing an iron must be listed in
        ``confirmed_ids``.
        """

        parse_date_key(date_key)
        if is_past(date_key, self.today()):
            raise PastDateError(date_key)
        item_ids = list(dict.fromkeys(item_ids))
        if not item_ids:
            raise ItemValidationError("Select at least one item to save a plan", fields=["itemIds"])

        with self.state.lock:
            plans = self.state.plans
            existing = set(plans[date_key].item_ids) if date_key in plans else set()
            by_id = index_by_id(self.state.wardrobe)
            unconfirmed = []
            for item_id in item_ids:
                if item_id in existing:
                    continue
                item = by_id.get(item_id)
                if item is None:
                    raise UnknownItemError(item_id)
                if not item.is_available:
                    raise ItemValidationError(
                        f"{item.name} is {item.status.value} and cannot be planned", fields=["itemIds"]
                    )
                if item.needs_ironing and item_id not in confirmed_ids:
                    unconfirmed.append(item_id)
            if unconfirmed:
                raise ConfirmationRequired(date_key, unconfirmed)

            updated = save_plan(plans, date_key, item_ids, note)
            self.state.replace_plans(updated)
        return updated[date_key]

    def day_view(self, date_key: Optional[str] = None) -> DayView:
        return resolve_day(
            date_key or self.today(), self.today(), self.state.plans, self.state.wear_log, self.state.wardrobe
        )

    def active_days(self) -> List[str]:
        return active_days(self.state.plans, self.state.wear_log)

    # ------------------------------------------------------------------
    # Insights and suggestions
    # ------------------------------------------------------------------
    def insights(self, limit: Optional[int] = None) -> List[WearCount]:
        return rank_wear_frequency(self.state.wear_log, self.state.wardrobe, limit)

    def suggest_outfit(self, occasion: str) -> ResolvedSuggestion:
        return self.outfit_helper.suggest(
            occasion, self.state.wardrobe, ai_enabled=self.state.app_settings.ai_features_enabled
        )

    # ------------------------------------------------------------------
    # Categories, settings, onboarding
    # ------------------------------------------------------------------
    def add_category(self, name: str) -> List[str]:
        with self.state.lock:
            updated = category_rules.add_category(self.state.categories, name)
            self.state.replace_categories(updated)
        return updated

    def delete_category(self, name: str) -> List[str]:
        """Drop a category; items already using it keep their label."""

        with self.state.lock:
            updated = category_rules.delete_category(self.state.categories, name)
            self.state.replace_categories(updated)
        return updated

    def update_app_settings(self, settings: AppSettings) -> AppSettings:
        self.state.replace_app_settings(settings)
        return settings

    def update_notification_settings(self, settings: NotificationSettings) -> NotificationSettings:
        self.state.replace_notification_settings(settings)
        if settings.enabled:
            self.request_notification_permission()
        self._restart_reminder_timer()
        return settings

    def complete_onboarding(self) -> None:
        self.state.set_onboarding_complete(True)

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------
    def list_inventory(self) -> List[InventoryItem]:
        return self.state.inventory

    def _inventory_item(self, payload: InventoryPayload, item_id: str) -> InventoryItem:
        return InventoryItem(
            item_id=item_id,
            name=payload.name,
            category=payload.category.strip(),
            location=payload.location.model_dump(by_alias=True) if payload.location else None,
            notes=(payload.notes or "").strip() or None,
        )

    def add_inventory_item(self, payload: InventoryPayload) -> InventoryItem:
        item = self._inventory_item(payload, uuid.uuid4().hex)
        with self.state.lock:
            self.state.replace_inventory([*self.state.inventory, item])
        return item

    def update_inventory_item(self, item_id: str, payload: InventoryPayload) -> InventoryItem:
        with self.state.lock:
            inventory = self.state.inventory
            if all(entry.item_id != item_id for entry in inventory):
                raise UnknownItemError(item_id)
            item = self._inventory_item(payload, item_id)
            self.state.replace_inventory([item if entry.item_id == item_id else entry for entry in inventory])
        return item

    def delete_inventory_item(self, item_id: str) -> None:
        with self.state.lock:
            inventory = self.state.inventory
            remaining = [entry for entry in inventory if entry.item_id != item_id]
            if len(remaining) == len(inventory):
                raise UnknownItemError(item_id)
            self.state.replace_inventory(remaining)

    def snapshot(self) -> Tuple[int, int, int]:
        """Sizes of wardrobe, wear log and plans, for health checks."""

        return len(self.state.wardrobe), len(self.state.wear_log), len(self.state.plans)


__all__ = ["WardrobeApp"]
