"""Outfit planning over the date-keyed plan store.

Two rules shape everything here:

* Days before today are read-only. What was worn on them comes from the wear
  log, never from the plan record, which is kept only as an archive.
* Only available items can be selected. Selecting one that needs ironing goes
  through an explicit confirmation step; removing an item never does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from logic.date_keys import is_past, parse_date_key, shift_date_key, to_date_key
from models.clothing import ClothingItem, PlannedOutfit, WornLogEntry, index_by_id
from models.errors import PastDateError


def save_plan(
    plans: Mapping[str, PlannedOutfit], date_key: str, item_ids: Sequence[str], note: Optional[str] = None
) -> Dict[str, PlannedOutfit]:
    """Return a copy of ``plans`` with ``date_key`` replaced wholesale."""

    parse_date_key(date_key)
    updated = dict(plans)
    updated[date_key] = PlannedOutfit(item_ids=list(item_ids), note=(note or "").strip() or None)
    return updated


def wear_log_by_day(wear_log: Iterable[WornLogEntry]) -> Dict[str, List[str]]:
    """Item ids per date-key in log order, without repeats."""

    grouped: Dict[str, List[str]] = {}
    for entry in wear_log:
        ids = grouped.setdefault(to_date_key(entry.worn_at), [])
        if entry.item_id not in ids:
            ids.append(entry.item_id)
    return grouped


def active_days(plans: Mapping[str, PlannedOutfit], wear_log: Iterable[WornLogEntry]) -> List[str]:
    """Every day with a plan or a logged wear, past or future."""

    days = set(plans)
    days.update(to_date_key(entry.worn_at) for entry in wear_log)
    return sorted(days)


@dataclass
class DayView:
    date_key: str
    is_past: bool
    source: str
    items: List[ClothingItem] = field(default_factory=list)
    note: Optional[str] = None


def resolve_day(
    date_key: str,
    today: str,
    plans: Mapping[str, PlannedOutfit],
    wear_log: Iterable[WornLogEntry],
    wardrobe: Iterable[ClothingItem],
) -> DayView:
    """Items for one day.

    ``date_key < today`` reads the wear log; today and later read the plan.
    Ids that no longer resolve to a wardrobe item are dropped. A past day
    still shows its archived plan note.
    """

    parse_date_key(date_key)
    by_id = index_by_id(wardrobe)
    plan = plans.get(date_key)
    if is_past(date_key, today):
        item_ids = wear_log_by_day(wear_log).get(date_key, [])
        source = "wear_log"
    else:
        item_ids = list(plan.item_ids) if plan else []
        source = "plan"

    items = [by_id[item_id] for item_id in dict.fromkeys(item_ids) if item_id in by_id]
    return DayView(
        date_key=date_key,
        is_past=is_past(date_key, today),
        source=source,
        items=items,
        note=plan.note if plan else None,
    )


class ToggleOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    REJECTED = "rejected"
    NEEDS_CONFIRMATION = "needs_confirmation"


class PlannerSession:
    """Editable selection for one day, with a pending-confirmation state.

    The session never writes anything; :meth:`to_plan` hands the result to
    whoever owns the plan store.
    """

    def __init__(
        self,
        date_key: str,
        today: str,
        wardrobe: Sequence[ClothingItem],
        plans: Mapping[str, PlannedOutfit],
    ) -> None:
        self.today = today
        self._by_id = index_by_id(wardrobe)
        self._plans = plans
        self.pending_confirmation: Optional[str] = None
        self.date_key = date_key
        self.selected_ids: List[str] = []
        self.note = ""
        self._load(date_key)

    @classmethod
    def plan_to_wear(
        cls,
        item: ClothingItem,
        today: str,
        wardrobe: Sequence[ClothingItem],
        plans: Mapping[str, PlannedOutfit],
    ) -> "PlannerSession":
        """Open tomorrow's plan with ``item`` offered for selection."""

        session = cls(shift_date_key(today, 1), today, wardrobe, plans)
        if item.item_id not in session.selected_ids:
            session.toggle(item.item_id)
        return session

    def _load(self, date_key: str) -> None:
        parse_date_key(date_key)
        plan = self._plans.get(date_key)
        self.date_key = date_key
        self.selected_ids = list(plan.item_ids) if plan else []
        self.note = (plan.note or "") if plan else ""
        self.pending_confirmation = None

    @property
    def is_past(self) -> bool:
        return is_past(self.date_key, self.today)

    @property
    def available_items(self) -> List[ClothingItem]:
        return [item for item in self._by_id.values() if item.is_available]

    def change_date(self, date_key: str) -> None:
        """Switch days; unsaved edits for the previous day are dropped."""

        self._load(date_key)

    def set_note(self, note: str) -> None:
        if self.is_past:
            raise PastDateError(self.date_key)
        self.note = note

    def toggle(self, item_id: str) -> ToggleOutcome:
        item = self._by_id.get(item_id)
        if item is None or self.is_past or not item.is_available:
            return ToggleOutcome.REJECTED
        if self.pending_confirmation is not None:
            return ToggleOutcome.REJECTED

        if item_id in self.selected_ids:
            self.selected_ids.remove(item_id)
            return ToggleOutcome.REMOVED
        if item.needs_ironing:
            self.pending_confirmation = item_id
            return ToggleOutcome.NEEDS_CONFIRMATION
        self.selected_ids.append(item_id)
        return ToggleOutcome.ADDED

    def confirm(self) -> ToggleOutcome:
        if self.pending_confirmation is None:
            return ToggleOutcome.REJECTED
        self.selected_ids.append(self.pending_confirmation)
        self.pending_confirmation = None
        return ToggleOutcome.ADDED

    def decline(self) -> ToggleOutcome:
        if self.pending_confirmation is None:
            return ToggleOutcome.REJECTED
        self.pending_confirmation = None
        return ToggleOutcome.REJECTED

    @property
    def can_save(self) -> bool:
        return not self.is_past and bool(self.selected_ids) and self.pending_confirmation is None

    def to_plan(self) -> PlannedOutfit:
        if self.is_past:
            raise PastDateError(self.date_key)
        if self.pending_confirmation is not None:
            raise ValueError("Resolve the pending ironing confirmation before saving")
        if not self.selected_ids:
            raise ValueError("Select at least one item to save a plan")
        return PlannedOutfit(item_ids=list(self.selected_ids), note=self.note.strip() or None)


__all__ = [
    "DayView",
    "PlannerSession",
    "ToggleOutcome",
    "active_days",
    "resolve_day",
    "save_plan",
    "wear_log_by_day",
]
