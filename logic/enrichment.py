"""Item drafts that merge late AI suggestions without clobbering user edits.

A draft is the form state for an item that does not exist yet. Category and
dominant color may arrive from the advisor after the user has started typing;
an AI value is only applied to a field the user has not touched.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Set

from models.categories import first_category, validate_category
from models.clothing import ClothingItem, IroningStatus, LaundryStatus
from models.errors import CategoryError, ItemValidationError

AI_FIELDS = ("category", "dominant_color")
DEFAULT_DRAFT_COLOR = "#808080"

# Per-field enrichment progress, as shown next to each draft.
AI_PENDING = "loading"
AI_DONE = "done"
AI_FAILED = "error"
AI_DISABLED = "disabled"
AI_IGNORED = "ignored"


def name_from_filename(original_name: str) -> str:
    """``photos/blue_linen-shirt.jpg`` -> ``blue linen shirt``."""

    stem = PurePosixPath(original_name).name.rsplit(".", 1)[0]
    return stem.replace("-", " ").replace("_", " ").strip()


@dataclass
class ItemDraft:
    category: str
    name: str = ""
    image_url: str = ""
    occasions: List[str] = field(default_factory=list)
    location: Optional[Dict[str, Any]] = None
    laundry_instructions: str = ""
    ironing_status: IroningStatus = IroningStatus.IRONED
    dominant_color: Optional[str] = DEFAULT_DRAFT_COLOR
    draft_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    touched: Set[str] = field(default_factory=set)
    ai_status: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    @classmethod
    def blank(cls, categories: Sequence[str]) -> "ItemDraft":
        return cls(category=first_category(categories))

    @classmethod
    def from_upload(cls, original_name: str, image_url: str, categories: Sequence[str]) -> "ItemDraft":
        return cls(
            category=first_category(categories),
            name=name_from_filename(original_name),
            image_url=image_url,
        )

    def edit(self, field_name: str, value: Any) -> None:
        """User edit; the field is never overwritten by the advisor afterwards."""

        if field_name in ("draft_id", "touched", "ai_status") or not hasattr(self, field_name):
            raise AttributeError(f"ItemDraft has no editable field {field_name!r}")
        with self._lock:
            setattr(self, field_name, value)
            self.touched.add(field_name)

    def mark_pending(self, field_name: str) -> None:
        with self._lock:
            self.ai_status[field_name] = AI_PENDING

    def apply_ai(self, field_name: str, value: Any) -> bool:
        """Merge an advisor result; returns whether it was applied."""

        if field_name not in AI_FIELDS:
            raise ValueError(f"{field_name!r} is not filled by the advisor")
        with self._lock:
            if field_name in self.touched:
                self.ai_status[field_name] = AI_IGNORED
                return False
            setattr(self, field_name, value)
            self.ai_status[field_name] = AI_DONE
            return True

    def mark_failed(self, field_name: str) -> None:
        with self._lock:
            self.ai_status[field_name] = AI_FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Camel-case form state, read in one consistent snapshot."""

        with self._lock:
            return {
                "draftId": self.draft_id,
                "name": self.name,
                "category": self.category,
                "imageUrl": self.image_url,
                "occasions": [getattr(occasion, "value", occasion) for occasion in self.occasions],
                "location": dict(self.location) if self.location else None,
                "laundryInstructions": self.laundry_instructions,
                "ironingStatus": getattr(self.ironing_status, "value", self.ironing_status),
                "dominantColor": self.dominant_color,
                "touched": sorted(self.touched),
                "aiStatus": dict(self.ai_status),
            }

    def to_item(self, categories: Sequence[str], item_id: Optional[str] = None) -> ClothingItem:
        """Validate the form and build an available item from it."""

        missing = []
        if not (self.name or "").strip():
            missing.append("name")
        if not (self.image_url or "").strip():
            missing.append("imageUrl")
        if missing:
            raise ItemValidationError("Please provide a name and an image for the item.", fields=missing)
        try:
            category = validate_category(categories, self.category)
        except CategoryError as exc:
            raise ItemValidationError(str(exc), fields=["category"]) from exc

        return ClothingItem(
            item_id=item_id or uuid.uuid4().hex,
            name=self.name.strip(),
            category=category,
            image_url=self.image_url,
            occasions=list(self.occasions),
            location=self.location,
            laundry_instructions=self.laundry_instructions,
            status=LaundryStatus.AVAILABLE,
            ironing_status=self.ironing_status,
            dominant_color=self.dominant_color or None,
        )


__all__ = [
    "AI_DISABLED",
    "AI_DONE",
    "AI_FAILED",
    "AI_IGNORED",
    "AI_PENDING",
    "ItemDraft",
    "name_from_filename",
]
