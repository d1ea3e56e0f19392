"""Wardrobe data models and their persisted dict form."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from models.errors import ItemValidationError

LOGGER = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
SUGGESTION_SLOTS = ("top", "bottom", "dress", "outerwear", "shoes", "accessory")


class Occasion(str, Enum):
    CASUAL = "Casual"
    FORMAL = "Formal"
    PARTY = "Party"
    WORK = "Work"
    WORKOUT = "Workout"
    LOUNGE = "Lounge"


class LaundryStatus(str, Enum):
    AVAILABLE = "Available"
    IN_LAUNDRY = "In Laundry"
    WASHED = "Washed"


class IroningStatus(str, Enum):
    IRONED = "Ironed"
    NEEDS_IRONING = "Needs Ironing"


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Accept enum members, display values or member names in any casing."""

    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    raise ItemValidationError(f"Invalid {enum_cls.__name__}: {value!r}")


def to_millis(value: datetime) -> int:
    """Epoch milliseconds; naive datetimes are read as local time."""

    return int(round(value.timestamp() * 1000))


def from_millis(value: int | float) -> datetime:
    return datetime.fromtimestamp(float(value) / 1000)


@dataclass
class ClothingItemLocation:
    """Where an item is kept, e.g. Bedroom > Wardrobe > Top shelf."""

    storage: str
    container: str
    sub_container: Optional[str] = None

    def label(self) -> str:
        return " > ".join(part for part in (self.storage, self.container, self.sub_container) if part)


def location_from_raw(raw: Any) -> Optional[ClothingItemLocation]:
    """Only a location with both storage and container filled in is kept."""

    if raw is None:
        return None
    if isinstance(raw, ClothingItemLocation):
        return raw if raw.storage.strip() and raw.container.strip() else None
    storage = str(raw.get("storage") or "").strip()
    container = str(raw.get("container") or "").strip()
    if not storage or not container:
        return None
    sub_container = raw.get("subContainer", raw.get("sub_container"))
    return ClothingItemLocation(
        storage=storage,
        container=container,
        sub_container=str(sub_container).strip() or None if sub_container else None,
    )


def location_to_dict(location: Optional[ClothingItemLocation]) -> Optional[Dict[str, Any]]:
    if location is None:
        return None
    payload: Dict[str, Any] = {"storage": location.storage, "container": location.container}
    if location.sub_container:
        payload["subContainer"] = location.sub_container
    return payload


@dataclass
class ClothingItem:
    """A single garment in the wardrobe.

    ``added_to_laundry_at`` is set exactly while ``status`` is In Laundry; the
    constructor rejects any other combination.
    """

    item_id: str
    name: str
    category: str
    image_url: str
    occasions: List[Occasion] = field(default_factory=list)
    location: Optional[ClothingItemLocation] = None
    laundry_instructions: str = ""
    status: LaundryStatus = LaundryStatus.AVAILABLE
    added_to_laundry_at: Optional[datetime] = None
    ironing_status: IroningStatus = IroningStatus.IRONED
    dominant_color: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.item_id:
            raise ItemValidationError("ClothingItem requires an id", fields=["id"])
        self.status = _coerce_enum(LaundryStatus, self.status)
        self.ironing_status = _coerce_enum(IroningStatus, self.ironing_status)
        occasions: List[Occasion] = []
        for value in self.occasions or []:
            occasion = _coerce_enum(Occasion, value)
            if occasion not in occasions:
                occasions.append(occasion)
        self.occasions = occasions
        self.location = location_from_raw(self.location)
        if self.dominant_color is not None and not _HEX_COLOR.match(self.dominant_color):
            raise ItemValidationError(f"Invalid color {self.dominant_color!r}", fields=["dominantColor"])

        in_laundry = self.status is LaundryStatus.IN_LAUNDRY
        if in_laundry and self.added_to_laundry_at is None:
            raise ItemValidationError(
                "Items in the laundry need the time they were added", fields=["addedToLaundryAt"]
            )
        if not in_laundry and self.added_to_laundry_at is not None:
            raise ItemValidationError(
                "Only items in the laundry carry a laundry timestamp", fields=["addedToLaundryAt"]
            )

    @property
    def is_available(self) -> bool:
        return self.status is LaundryStatus.AVAILABLE

    @property
    def needs_ironing(self) -> bool:
        return self.ironing_status is IroningStatus.NEEDS_IRONING


def item_to_dict(item: ClothingItem) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": item.item_id,
        "name": item.name,
        "category": item.category,
        "occasions": [occasion.value for occasion in item.occasions],
        "imageUrl": item.image_url,
        "laundryInstructions": item.laundry_instructions,
        "status": item.status.value,
        "ironingStatus": item.ironing_status.value,
    }
    if item.location is not None:
        payload["location"] = location_to_dict(item.location)
    if item.added_to_laundry_at is not None:
        payload["addedToLaundryAt"] = to_millis(item.added_to_laundry_at)
    if item.dominant_color:
        payload["dominantColor"] = item.dominant_color
    return payload


def item_from_dict(data: Dict[str, Any]) -> ClothingItem:
    """Rebuild an item from its stored form, repairing stale laundry stamps."""

    status = _coerce_enum(LaundryStatus, data.get("status", LaundryStatus.AVAILABLE))
    raw_added = data.get("addedToLaundryAt", data.get("added_to_laundry_at"))
    added_at: Optional[datetime] = None
    if status is LaundryStatus.IN_LAUNDRY:
        if raw_added is None:
            LOGGER.warning("Laundry item without timestamp, stamping now", extra={"item_id": data.get("id")})
            added_at = datetime.now()
        else:
            added_at = raw_added if isinstance(raw_added, datetime) else from_millis(raw_added)

    color = data.get("dominantColor") or data.get("dominant_color") or None
    if color is not None and not _HEX_COLOR.match(str(color)):
        LOGGER.warning("Dropping unreadable item color", extra={"item_id": data.get("id"), "color": color})
        color = None

    return ClothingItem(
        item_id=str(data.get("id") or data.get("item_id") or ""),
        name=str(data.get("name") or ""),
        category=str(data.get("category") or ""),
        image_url=str(data.get("imageUrl") or data.get("image_url") or ""),
        occasions=list(data.get("occasions") or []),
        location=location_from_raw(data.get("location")),
        laundry_instructions=str(data.get("laundryInstructions") or data.get("laundry_instructions") or ""),
        status=status,
        added_to_laundry_at=added_at,
        ironing_status=data.get("ironingStatus", data.get("ironing_status", IroningStatus.IRONED)),
        dominant_color=color,
    )


@dataclass(frozen=True)
class WornLogEntry:
    """One item worn at one moment. Entries are never edited once written."""

    item_id: str
    worn_at: datetime


def wear_entry_to_dict(entry: WornLogEntry) -> Dict[str, Any]:
    return {"itemId": entry.item_id, "date": to_millis(entry.worn_at)}


def wear_entry_from_dict(data: Dict[str, Any]) -> WornLogEntry:
    raw_date = data.get("date", data.get("worn_at"))
    worn_at = raw_date if isinstance(raw_date, datetime) else from_millis(raw_date)
    return WornLogEntry(item_id=str(data.get("itemId") or data.get("item_id")), worn_at=worn_at)


@dataclass
class PlannedOutfit:
    item_ids: List[str] = field(default_factory=list)
    note: Optional[str] = None

    def __post_init__(self) -> None:
        seen: List[str] = []
        for item_id in self.item_ids:
            if item_id not in seen:
                seen.append(str(item_id))
        self.item_ids = seen
        self.note = self.note or None


PlannedOutfits = Dict[str, PlannedOutfit]


def plan_to_dict(plan: PlannedOutfit) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"itemIds": list(plan.item_ids)}
    if plan.note:
        payload["note"] = plan.note
    return payload


def plan_from_dict(data: Dict[str, Any]) -> PlannedOutfit:
    return PlannedOutfit(
        item_ids=[str(item_id) for item_id in data.get("itemIds", data.get("item_ids")) or []],
        note=data.get("note"),
    )


@dataclass
class InventoryItem:
    """A non-clothing possession tracked only by name and place."""

    item_id: str
    name: str
    category: str = ""
    location: Optional[ClothingItemLocation] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ItemValidationError("Please provide a name for the item.", fields=["name"])
        self.name = self.name.strip()
        self.location = location_from_raw(self.location)


def inventory_to_dict(item: InventoryItem) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"id": item.item_id, "name": item.name, "category": item.category}
    if item.location is not None:
        payload["location"] = location_to_dict(item.location)
    if item.notes:
        payload["notes"] = item.notes
    return payload


def inventory_from_dict(data: Dict[str, Any]) -> InventoryItem:
    return InventoryItem(
        item_id=str(data.get("id") or data.get("item_id")),
        name=str(data.get("name") or ""),
        category=str(data.get("category") or ""),
        location=location_from_raw(data.get("location")),
        notes=data.get("notes"),
    )


@dataclass(frozen=True)
class LaundryNotification:
    id: str
    message: str
    item_id: str


@dataclass
class OutfitSuggestion:
    reasoning: str
    top: Optional[str] = None
    bottom: Optional[str] = None
    dress: Optional[str] = None
    outerwear: Optional[str] = None
    shoes: Optional[str] = None
    accessory: Optional[str] = None

    def item_ids(self) -> List[str]:
        """Suggested ids in slot order, skipping empty slots."""

        return [value for value in (getattr(self, slot) for slot in SUGGESTION_SLOTS) if value]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"reasoning": self.reasoning}
        for slot in SUGGESTION_SLOTS:
            value = getattr(self, slot)
            if value:
                payload[slot] = value
        return payload


@dataclass
class AppSettings:
    ai_features_enabled: bool = True
    theme: str = "light"

    def __post_init__(self) -> None:
        if self.theme not in ("light", "dark"):
            raise ValueError(f"Unsupported theme {self.theme!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"aiFeaturesEnabled": self.ai_features_enabled, "theme": self.theme}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "AppSettings":
        data = data or {}
        return cls(
            ai_features_enabled=bool(data.get("aiFeaturesEnabled", data.get("ai_features_enabled", True))),
            theme=str(data.get("theme", "light")),
        )


@dataclass
class NotificationSettings:
    """Daily outfit-planning reminder at a local ``HH:MM``."""

    enabled: bool = False
    time: str = "08:00"

    def __post_init__(self) -> None:
        if not _TIME_OF_DAY.match(self.time):
            raise ValueError(f"Reminder time must be HH:MM, got {self.time!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "time": self.time}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "NotificationSettings":
        data = data or {}
        return cls(enabled=bool(data.get("enabled", False)), time=str(data.get("time", "08:00")))


def index_by_id(items: Iterable[ClothingItem]) -> Dict[str, ClothingItem]:
    return {item.item_id: item for item in items}


__all__ = [
    "Occasion",
    "LaundryStatus",
    "IroningStatus",
    "ClothingItemLocation",
    "ClothingItem",
    "WornLogEntry",
    "PlannedOutfit",
    "PlannedOutfits",
    "InventoryItem",
    "LaundryNotification",
    "OutfitSuggestion",
    "AppSettings",
    "NotificationSettings",
    "SUGGESTION_SLOTS",
    "index_by_id",
    "item_from_dict",
    "item_to_dict",
    "wear_entry_from_dict",
    "wear_entry_to_dict",
    "plan_from_dict",
    "plan_to_dict",
    "inventory_from_dict",
    "inventory_to_dict",
    "location_from_raw",
    "to_millis",
    "from_millis",
]
