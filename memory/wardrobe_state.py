"""In-memory source of truth for every collection, persisted on replace.

The application root owns one :class:`WardrobeState`. Components receive the
slices they need as plain lists/dicts and hand back whole replacements; there
is no partial update and no module-level singleton.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Sequence, TypeVar

from models.categories import DEFAULT_CATEGORIES
from models.clothing import (
    AppSettings,
    ClothingItem,
    InventoryItem,
    NotificationSettings,
    PlannedOutfit,
    PlannedOutfits,
    WornLogEntry,
    inventory_from_dict,
    inventory_to_dict,
    item_from_dict,
    item_to_dict,
    plan_from_dict,
    plan_to_dict,
    wear_entry_from_dict,
    wear_entry_to_dict,
)
from memory.collection_store import (
    APP_SETTINGS_KEY,
    CATEGORIES_KEY,
    INVENTORY_KEY,
    NOTIFICATION_SETTINGS_KEY,
    ONBOARDING_KEY,
    PLANNED_OUTFITS_KEY,
    WARDROBE_KEY,
    WEAR_LOG_KEY,
    CollectionStore,
)
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
T = TypeVar("T")


def _decode(key: str, raw: Any, decoder: Callable[[Any], T]) -> T | None:
    """Decode one stored record, or log and return ``None`` when it is unreadable."""

    try:
        return decoder(raw)
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        log_event(LOGGER, logging.WARNING, "stored_record_skipped", collection=key, error=str(exc))
        return None


def _decode_all(key: str, records: Any, decoder: Callable[[Any], T]) -> List[T]:
    decoded = (_decode(key, raw, decoder) for raw in records or [])
    return [record for record in decoded if record is not None]


class WardrobeState:
    """Typed get/replace access over a :class:`CollectionStore`."""

    def __init__(self, store: CollectionStore) -> None:
        self.store = store
        self.lock = threading.RLock()
        self._wardrobe: List[ClothingItem] = _decode_all(WARDROBE_KEY, store.get(WARDROBE_KEY, []), item_from_dict)
        self._inventory: List[InventoryItem] = _decode_all(
            INVENTORY_KEY, store.get(INVENTORY_KEY, []), inventory_from_dict
        )
        self._wear_log: List[WornLogEntry] = _decode_all(
            WEAR_LOG_KEY, store.get(WEAR_LOG_KEY, []), wear_entry_from_dict
        )
        self._plans: PlannedOutfits = {}
        for key, raw in (store.get(PLANNED_OUTFITS_KEY, {}) or {}).items():
            plan = _decode(PLANNED_OUTFITS_KEY, raw, plan_from_dict)
            if plan is not None:
                self._plans[key] = plan
        self._categories: List[str] = list(store.get(CATEGORIES_KEY, DEFAULT_CATEGORIES))
        # Unreadable settings fall back to defaults.
        self._app_settings = (
            _decode(APP_SETTINGS_KEY, store.get(APP_SETTINGS_KEY), AppSettings.from_dict) or AppSettings()
        )
        self._notification_settings = (
            _decode(NOTIFICATION_SETTINGS_KEY, store.get(NOTIFICATION_SETTINGS_KEY), NotificationSettings.from_dict)
            or NotificationSettings()
        )
        self._onboarding_complete = bool(store.get(ONBOARDING_KEY, False))

    @property
    def wardrobe(self) -> List[ClothingItem]:
        with self.lock:
            return list(self._wardrobe)

    def replace_wardrobe(self, items: Sequence[ClothingItem]) -> None:
        with self.lock:
            self._wardrobe = list(items)
            self.store.set(WARDROBE_KEY, [item_to_dict(item) for item in self._wardrobe])

    @property
    def inventory(self) -> List[InventoryItem]:
        with self.lock:
            return list(self._inventory)

    def replace_inventory(self, items: Sequence[InventoryItem]) -> None:
        with self.lock:
            self._inventory = list(items)
            self.store.set(INVENTORY_KEY, [inventory_to_dict(item) for item in self._inventory])

    @property
    def wear_log(self) -> List[WornLogEntry]:
        with self.lock:
            return list(self._wear_log)

    def replace_wear_log(self, entries: Sequence[WornLogEntry]) -> None:
        with self.lock:
            self._wear_log = list(entries)
            self.store.set(WEAR_LOG_KEY, [wear_entry_to_dict(entry) for entry in self._wear_log])

    @property
    def plans(self) -> PlannedOutfits:
        with self.lock:
            return {key: PlannedOutfit(list(plan.item_ids), plan.note) for key, plan in self._plans.items()}

    def replace_plans(self, plans: Dict[str, PlannedOutfit]) -> None:
        with self.lock:
            self._plans = dict(plans)
            self.store.set(
                PLANNED_OUTFITS_KEY, {key: plan_to_dict(plan) for key, plan in sorted(self._plans.items())}
            )

    @property
    def categories(self) -> List[str]:
        with self.lock:
            return list(self._categories)

    def replace_categories(self, categories: Sequence[str]) -> None:
        with self.lock:
            self._categories = list(categories)
            self.store.set(CATEGORIES_KEY, list(self._categories))

    @property
    def app_settings(self) -> AppSettings:
        with self.lock:
            return AppSettings(**vars(self._app_settings))

    def replace_app_settings(self, settings: AppSettings) -> None:
        with self.lock:
            self._app_settings = settings
            self.store.set(APP_SETTINGS_KEY, settings.to_dict())

    @property
    def notification_settings(self) -> NotificationSettings:
        with self.lock:
            return NotificationSettings(**vars(self._notification_settings))

    def replace_notification_settings(self, settings: NotificationSettings) -> None:
        with self.lock:
            self._notification_settings = settings
            self.store.set(NOTIFICATION_SETTINGS_KEY, settings.to_dict())

    @property
    def onboarding_complete(self) -> bool:
        return self._onboarding_complete

    def set_onboarding_complete(self, value: bool = True) -> None:
        with self.lock:
            self._onboarding_complete = bool(value)
            self.store.set(ONBOARDING_KEY, self._onboarding_complete)


__all__ = ["WardrobeState"]
