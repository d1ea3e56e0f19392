"""Wear-frequency insights derived from the wear log."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

from models.clothing import ClothingItem, WornLogEntry, index_by_id


@dataclass(frozen=True)
class WearCount:
    item: ClothingItem
    count: int


def rank_wear_frequency(
    wear_log: Iterable[WornLogEntry], wardrobe: Iterable[ClothingItem], limit: Optional[int] = None
) -> List[WearCount]:
    """Most-worn items first.

    Entries for deleted items are left out. Equal counts keep the order in
    which the items first appear in the log.
    """

    counts = Counter(entry.item_id for entry in wear_log)
    by_id = index_by_id(wardrobe)
    ranked = [
        WearCount(item=by_id[item_id], count=count)
        for item_id, count in counts.most_common()
        if item_id in by_id
    ]
    return ranked[:limit] if limit is not None else ranked


__all__ = ["WearCount", "rank_wear_frequency"]
