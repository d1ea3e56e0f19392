"""Outfit helper agent over the style advisor."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

import pytest

from agents.outfit_helper import EmptyOccasionError, OutfitHelperAgent
from logic.laundry import move_to_laundry
from models.clothing import ClothingItem, OutfitSuggestion
from tools.style_advisor import MockStyleAdvisor, StyleAdvisor


class RecordingAdvisor(StyleAdvisor):
    def __init__(self, suggestion: OutfitSuggestion) -> None:
        self.suggestion = suggestion
        self.seen: list[str] = []

    def suggest_outfit(self, occasion: str, available_items: Sequence[ClothingItem]) -> OutfitSuggestion:
        self.seen = [item.item_id for item in available_items]
        return self.suggestion

    def categorize_image(self, image, categories):
        raise NotImplementedError

    def dominant_color(self, image):
        raise NotImplementedError


def test_only_available_items_are_offered(make_item, now: datetime) -> None:
    advisor = RecordingAdvisor(OutfitSuggestion(reasoning="ok", top="t"))
    wardrobe = [make_item("t"), move_to_laundry(make_item("dirty"), now), make_item("b", "Bottom")]

    result = OutfitHelperAgent(advisor).suggest("Brunch", wardrobe)

    assert advisor.seen == ["t", "b"]
    assert result.items["top"].item_id == "t"


def test_unknown_or_unavailable_ids_are_dropped(make_item, now: datetime) -> None:
    advisor = RecordingAdvisor(OutfitSuggestion(reasoning="ok", top="t", bottom="dirty", shoes="ghost"))
    wardrobe = [make_item("t"), move_to_laundry(make_item("dirty", "Bottom"), now)]

    result = OutfitHelperAgent(advisor).suggest("Brunch", wardrobe)

    assert list(result.items) == ["top"]
    assert result.dropped_ids == ["dirty", "ghost"]
    assert result.to_dict() == {"reasoning": "ok", "items": {"top": "t"}, "droppedIds": ["dirty", "ghost"]}


@pytest.mark.parametrize("occasion", ["", "   "])
def test_empty_occasion_is_rejected(occasion: str) -> None:
    with pytest.raises(EmptyOccasionError):
        OutfitHelperAgent(MockStyleAdvisor()).suggest(occasion, [])


def test_disabled_ai_uses_offline_advisor(make_item) -> None:
    online = RecordingAdvisor(OutfitSuggestion(reasoning="online"))

    result = OutfitHelperAgent(online).suggest("Work", [make_item("t")], ai_enabled=False)

    assert online.seen == []
    assert "sample outfit" in result.reasoning
    assert result.items["top"].item_id == "t"
