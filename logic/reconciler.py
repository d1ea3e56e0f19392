"""Startup reconciliation of past plans into the wear log and laundry.

A plan for a day that has already ended is treated as worn: each planned item
gets a wear-log entry stamped at local noon of that day and goes into the
laundry needing an iron. A day that already has any wear-log entry is skipped,
so running this any number of times logs each past plan once.

Plan records themselves are left in place as history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Sequence, Set

from wardrobe_app.logging_config import get_logger, log_event
from logic.date_keys import is_past, to_date_key, worn_at_noon
from logic.laundry import mark_worn
from models.clothing import ClothingItem, PlannedOutfit, WornLogEntry

LOGGER = get_logger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    wardrobe: List[ClothingItem]
    wear_log: List[WornLogEntry]
    migrated_dates: List[str] = field(default_factory=list)
    skipped_dates: List[str] = field(default_factory=list)
    appended_entries: List[WornLogEntry] = field(default_factory=list)
    transitioned_item_ids: List[str] = field(default_factory=list)
    missing_item_ids: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.appended_entries)


def logged_date_keys(wear_log: Sequence[WornLogEntry]) -> Set[str]:
    return {to_date_key(entry.worn_at) for entry in wear_log}


def reconcile_past_plans(
    plans: Mapping[str, PlannedOutfit],
    wear_log: Sequence[WornLogEntry],
    wardrobe: Sequence[ClothingItem],
    now: datetime,
) -> ReconcileResult:
    """Move every unlogged past plan into history.

    Items referenced by a plan but gone from the wardrobe are still logged as
    worn; they simply have no laundry state to update.
    """

    today = to_date_key(now)
    already_logged = logged_date_keys(wear_log)
    new_log = list(wear_log)
    updated = list(wardrobe)
    positions: Dict[str, int] = {item.item_id: index for index, item in enumerate(updated)}
    result = ReconcileResult(wardrobe=updated, wear_log=new_log)

    for date_key in sorted(plans):
        if not is_past(date_key, today):
            continue
        if date_key in already_logged:
            result.skipped_dates.append(date_key)
            continue

        worn_at = worn_at_noon(date_key)
        for item_id in plans[date_key].item_ids:
            entry = WornLogEntry(item_id=item_id, worn_at=worn_at)
            new_log.append(entry)
            result.appended_entries.append(entry)

            index = positions.get(item_id)
            if index is None:
                result.missing_item_ids.append(item_id)
                continue
            updated[index] = mark_worn(updated[index], now)
            if item_id not in result.transitioned_item_ids:
                result.transitioned_item_ids.append(item_id)
        result.migrated_dates.append(date_key)

    if result.missing_item_ids:
        log_event(
            LOGGER,
            logging.INFO,
            "reconcile_missing_items",
            missing_item_ids=result.missing_item_ids,
        )
    log_event(
        LOGGER,
        logging.INFO,
        "reconcile_completed",
        today=today,
        migrated_dates=result.migrated_dates,
        skipped=len(result.skipped_dates),
        appended=len(result.appended_entries),
        transitioned=len(result.transitioned_item_ids),
    )
    return result


__all__ = ["ReconcileResult", "logged_date_keys", "reconcile_past_plans"]
