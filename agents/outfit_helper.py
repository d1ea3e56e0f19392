"""Outfit helper agent: asks the style advisor for a look from clean clothes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from models.clothing import ClothingItem, OutfitSuggestion, index_by_id
from models.errors import WardrobeError
from tools.style_advisor import MockStyleAdvisor, StyleAdvisor
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)


class EmptyOccasionError(WardrobeError, ValueError):
    """The outfit helper was asked for a suggestion without an occasion."""


@dataclass
class ResolvedSuggestion:
    """A suggestion with its ids turned back into wardrobe items."""

    reasoning: str
    items: Dict[str, ClothingItem] = field(default_factory=dict)
    dropped_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "reasoning": self.reasoning,
            "items": {slot: item.item_id for slot, item in self.items.items()},
            "droppedIds": list(self.dropped_ids),
        }


class OutfitHelperAgent:
    """Suggests outfits using only items that are currently available."""

    def __init__(self, advisor: StyleAdvisor, offline_advisor: Optional[StyleAdvisor] = None) -> None:
        self.advisor = advisor
        self.offline_advisor = offline_advisor or MockStyleAdvisor()

    def suggest(
        self, occasion: str, wardrobe: Sequence[ClothingItem], ai_enabled: bool = True
    ) -> ResolvedSuggestion:
        occasion = (occasion or "").strip()
        if not occasion:
            raise EmptyOccasionError("Please enter an occasion.")

        available = [item for item in wardrobe if item.is_available]
        advisor = self.advisor if ai_enabled else self.offline_advisor
        with operation_context("agent:outfit_helper.suggest"):
            log_event(
                logger,
                logging.INFO,
                "agent_call_started",
                agent="outfit_helper",
                occasion=occasion,
                available=len(available),
                ai_enabled=ai_enabled,
            )
            suggestion = advisor.suggest_outfit(occasion, available)
            resolved = self._resolve(suggestion, available)
            log_event(
                logger,
                logging.INFO,
                "agent_call_completed",
                agent="outfit_helper",
                slots=sorted(resolved.items),
                dropped=resolved.dropped_ids,
            )
            return resolved

    @staticmethod
    def _resolve(suggestion: OutfitSuggestion, available: Sequence[ClothingItem]) -> ResolvedSuggestion:
        by_id = index_by_id(available)
        resolved = ResolvedSuggestion(reasoning=suggestion.reasoning)
        for slot, item_id in suggestion.to_dict().items():
            if slot == "reasoning" or not item_id:
                continue
            item = by_id.get(item_id)
            if item is None:
                resolved.dropped_ids.append(item_id)
                continue
            resolved.items[slot] = item
        return resolved


__all__ = ["EmptyOccasionError", "OutfitHelperAgent", "ResolvedSuggestion"]
