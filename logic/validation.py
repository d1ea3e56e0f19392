"""Pydantic schemas for HTTP payloads and AI responses."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.clothing import OutfitSuggestion


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LocationPayload(_CamelModel):
    storage: str = ""
    container: str = ""
    sub_container: Optional[str] = Field(None, alias="subContainer")


class ItemPayload(_CamelModel):
    """Fields a user submits when adding or editing a clothing item."""

    name: str = ""
    category: str = ""
    image_url: str = Field("", alias="imageUrl")
    occasions: List[str] = []
    location: Optional[LocationPayload] = None
    laundry_instructions: str = Field("", alias="laundryInstructions")
    ironing_status: Optional[str] = Field(None, alias="ironingStatus")
    dominant_color: Optional[str] = Field(None, alias="dominantColor")


class DraftPayload(_CamelModel):
    """A new item form started from an uploaded photo."""

    image_url: str = Field(min_length=1, alias="imageUrl")
    name: str = ""


class DraftEditPayload(_CamelModel):
    """Fields a user changed on an open draft; omitted fields stay as they are."""

    name: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    occasions: Optional[List[str]] = None
    location: Optional[LocationPayload] = None
    laundry_instructions: Optional[str] = Field(None, alias="laundryInstructions")
    ironing_status: Optional[Literal["Ironed", "Needs Ironing"]] = Field(None, alias="ironingStatus")
    dominant_color: Optional[str] = Field(None, alias="dominantColor", pattern=r"^#[0-9a-fA-F]{6}$")

    def changes(self) -> Dict[str, Any]:
        """Edited fields keyed by draft attribute name."""

        changed = {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in ("location", "dominant_color")
        }
        if "location" in changed:
            changed["location"] = self.location.model_dump(by_alias=True) if self.location else None
        return changed


class SaveDraftsPayload(_CamelModel):
    draft_ids: List[str] = Field(min_length=1, alias="draftIds")


class InventoryPayload(_CamelModel):
    name: str = ""
    category: str = ""
    location: Optional[LocationPayload] = None
    notes: Optional[str] = None


class PlanPayload(_CamelModel):
    item_ids: List[str] = Field(default_factory=list, alias="itemIds")
    note: Optional[str] = None
    confirmed_item_ids: List[str] = Field(default_factory=list, alias="confirmedItemIds")


class LogWearPayload(_CamelModel):
    worn_on: date = Field(alias="wornOn")


class WashPayload(_CamelModel):
    categories: Optional[List[str]] = None


class CategoryPayload(_CamelModel):
    name: str = Field(min_length=1)


class AppSettingsPayload(_CamelModel):
    ai_features_enabled: bool = Field(True, alias="aiFeaturesEnabled")
    theme: Literal["light", "dark"] = "light"


class NotificationSettingsPayload(_CamelModel):
    enabled: bool = False
    time: str = Field("08:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class SuggestionRequest(_CamelModel):
    occasion: str = Field(min_length=1)

    @field_validator("occasion")
    @classmethod
    def _strip(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter an occasion.")
        return value.strip()


class OutfitSuggestionPayload(BaseModel):
    """Shape the model must answer with; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    reasoning: str
    top: Optional[str] = None
    bottom: Optional[str] = None
    dress: Optional[str] = None
    outerwear: Optional[str] = None
    shoes: Optional[str] = None
    accessory: Optional[str] = None

    def to_suggestion(self) -> OutfitSuggestion:
        return OutfitSuggestion(**self.model_dump())


class ValidationResult(BaseModel):
    """Wrapper returned when a payload fails validation."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


__all__ = [
    "AppSettingsPayload",
    "CategoryPayload",
    "DraftEditPayload",
    "DraftPayload",
    "InventoryPayload",
    "ItemPayload",
    "LocationPayload",
    "LogWearPayload",
    "NotificationSettingsPayload",
    "OutfitSuggestionPayload",
    "PlanPayload",
    "SaveDraftsPayload",
    "SuggestionRequest",
    "ValidationResult",
    "WashPayload",
]
