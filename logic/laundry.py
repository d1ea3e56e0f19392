"""Laundry lifecycle transitions: Available -> In Laundry -> Washed -> Available.

Every transition returns a new :class:`ClothingItem`; the caller swaps it into
the wardrobe collection. Requests from the wrong state raise
:class:`LaundryTransitionError` and change nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models.categories import SEPARATE_WASH_CATEGORIES
from models.clothing import ClothingItem, IroningStatus, LaundryStatus
from models.errors import LaundryTransitionError


def move_to_laundry(item: ClothingItem, now: datetime, via_wear: bool = False) -> ClothingItem:
    """Send an available item to the laundry.

    Wearing an item always leaves it needing an iron; a manual move keeps
    whatever ironing status it had.
    """

    if item.status is not LaundryStatus.AVAILABLE:
        raise LaundryTransitionError(item.item_id, item.status.value, "move to laundry")
    return _enter_laundry(item, now, via_wear)


def _enter_laundry(item: ClothingItem, now: datetime, via_wear: bool) -> ClothingItem:
    ironing = IroningStatus.NEEDS_IRONING if via_wear else item.ironing_status
    return replace(
        item,
        status=LaundryStatus.IN_LAUNDRY,
        added_to_laundry_at=now,
        ironing_status=ironing,
    )


def mark_worn(item: ClothingItem, now: datetime) -> ClothingItem:
    """Wear pathway used by reconciliation: lands in the laundry from any state.

    An item already in the laundry gets a fresh timestamp, matching the last
    time it was worn.
    """

    return _enter_laundry(item, now, via_wear=True)


def mark_washed(item: ClothingItem) -> ClothingItem:
    if item.status is not LaundryStatus.IN_LAUNDRY:
        raise LaundryTransitionError(item.item_id, item.status.value, "mark as washed")
    return replace(item, status=LaundryStatus.WASHED, added_to_laundry_at=None)


def put_away(item: ClothingItem) -> ClothingItem:
    if item.status is not LaundryStatus.WASHED:
        raise LaundryTransitionError(item.item_id, item.status.value, "put away")
    return replace(item, status=LaundryStatus.AVAILABLE)


def set_ironing(item: ClothingItem, status: IroningStatus) -> ClothingItem:
    return replace(item, ironing_status=status)


def toggle_ironing(item: ClothingItem) -> ClothingItem:
    flipped = IroningStatus.IRONED if item.needs_ironing else IroningStatus.NEEDS_IRONING
    return set_ironing(item, flipped)


def mark_all_washed(
    wardrobe: Sequence[ClothingItem], categories: Optional[Iterable[str]] = None
) -> Tuple[List[ClothingItem], List[str]]:
    """Wash every laundry item, or only those whose category is allowed.

    Returns the new wardrobe and the ids that changed. Category matching is
    exact, like the labels the laundry groups are built from.
    """

    allowed = None if categories is None else set(categories)
    updated: List[ClothingItem] = []
    changed: List[str] = []
    for item in wardrobe:
        if item.status is LaundryStatus.IN_LAUNDRY and (allowed is None or item.category in allowed):
            updated.append(mark_washed(item))
            changed.append(item.item_id)
        else:
            updated.append(item)
    return updated, changed


@dataclass
class LaundryGroup:
    name: str
    items: List[ClothingItem] = field(default_factory=list)

    @property
    def categories(self) -> List[str]:
        """Allow-list for this group's "mark all as washed" action."""

        if self.name in SEPARATE_WASH_CATEGORIES:
            return [self.name]
        seen: List[str] = []
        for item in self.items:
            if item.category not in seen:
                seen.append(item.category)
        return seen


def group_laundry(wardrobe: Iterable[ClothingItem]) -> List[LaundryGroup]:
    """Split the laundry pile into Whites, Bedsheets and everything else."""

    groups: Dict[str, LaundryGroup] = {
        name: LaundryGroup(name) for name in (*SEPARATE_WASH_CATEGORIES, "Other")
    }
    for item in wardrobe:
        if item.status is not LaundryStatus.IN_LAUNDRY:
            continue
        key = item.category if item.category in SEPARATE_WASH_CATEGORIES else "Other"
        groups[key].items.append(item)
    return [group for group in groups.values() if group.items]


__all__ = [
    "LaundryGroup",
    "group_laundry",
    "mark_all_washed",
    "mark_washed",
    "mark_worn",
    "move_to_laundry",
    "put_away",
    "set_ironing",
    "toggle_ironing",
]
