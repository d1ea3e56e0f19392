"""AI style advisor: outfit suggestions, image categorisation, dominant color.

Every advisor call fails soft. Network errors, timeouts and unusable answers
are logged and replaced by a documented fallback, so the data-entry flow never
sees an exception from here.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import google.generativeai as genai
from pydantic import ValidationError

from logic.validation import OutfitSuggestionPayload
from models.categories import find_category, first_category
from models.clothing import SUGGESTION_SLOTS, ClothingItem, OutfitSuggestion
from tools.observability import instrument_tool

LOGGER = logging.getLogger(__name__)

FALLBACK_COLOR = "#808080"
SUGGESTION_FAILURE_REASONING = "Sorry, I couldn't come up with an outfit right now. Please try again."
NO_AVAILABLE_ITEMS_REASONING = (
    "You have no clean and available clothes! Add some items or update their status to get suggestions."
)
_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_DATA_URL = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,(.*)$", re.DOTALL)
MOCK_PALETTE = ["#e0e7ff", "#fecaca", "#d1fae5", "#fef3c7", "#e5e7eb", "#c7d2fe", "#fbcfe8", "#bfdbfe"]


def normalize_mime_type(mime_type: str) -> str:
    if mime_type.lower() == "image/jpg":
        return "image/jpeg"
    return mime_type.lower()


def decode_data_url(image: str) -> Optional[Tuple[str, bytes]]:
    """Split a ``data:image/...;base64,`` URL into mime type and bytes."""

    match = _DATA_URL.match(image or "")
    if not match:
        return None
    try:
        data = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError):
        return None
    return normalize_mime_type(match.group(1)), data


def match_category(answer: str, categories: Sequence[str]) -> str:
    """Map a free-text answer onto the user's categories, else the first one."""

    cleaned = (answer or "").strip().strip(".\"'")
    match = find_category(categories, cleaned)
    if match is not None:
        return match
    LOGGER.warning("Advisor returned an unknown category", extra={"answer": cleaned[:80]})
    return first_category(categories)


def match_color(answer: str) -> str:
    cleaned = (answer or "").strip().strip(".\"'`")
    if _HEX_COLOR.match(cleaned):
        return cleaned
    LOGGER.warning("Advisor returned an invalid hex color", extra={"answer": cleaned[:80]})
    return FALLBACK_COLOR


def _prompt_items(items: Sequence[ClothingItem]) -> List[Dict[str, Any]]:
    return [
        {
            "id": item.item_id,
            "name": item.name,
            "category": item.category,
            "occasions": [occasion.value for occasion in item.occasions],
            "ironingStatus": item.ironing_status.value,
        }
        for item in items
    ]


class StyleAdvisor(ABC):
    """Interface for the AI collaborator."""

    @abstractmethod
    def suggest_outfit(self, occasion: str, available_items: Sequence[ClothingItem]) -> OutfitSuggestion:
        """Suggest an outfit for ``occasion`` using only ``available_items``."""

    @abstractmethod
    def categorize_image(self, image: str, categories: Sequence[str]) -> str:
        """Return one of ``categories`` for the pictured garment."""

    @abstractmethod
    def dominant_color(self, image: str) -> str:
        """Return the garment's dominant color as ``#RRGGBB``."""


class GeminiStyleAdvisor(StyleAdvisor):
    """Gemini-backed advisor with schema validation and graceful fallbacks."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = "gemini-2.5-flash",
        timeout_seconds: float = 20.0,
        model: Any | None = None,
    ) -> None:
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        if model is None:
            if not api_key:
                raise ValueError("api_key is required for the Gemini advisor")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self._model = model

    def _generate(self, contents: Any, json_output: bool = False) -> str:
        kwargs: Dict[str, Any] = {"request_options": {"timeout": self.timeout_seconds}}
        if json_output:
            kwargs["generation_config"] = {"response_mime_type": "application/json"}
        response = self._model.generate_content(contents, **kwargs)
        return (response.text or "").strip()

    @instrument_tool("suggest_outfit")
    def suggest_outfit(self, occasion: str, available_items: Sequence[ClothingItem]) -> OutfitSuggestion:
        if not available_items:
            return OutfitSuggestion(reasoning=NO_AVAILABLE_ITEMS_REASONING)

        prompt = (
            "Based on the following list of available clothing items, please suggest a suitable outfit "
            f'for the occasion: "{occasion}".\n\n'
            "Available items (some may need ironing, as indicated by their 'ironingStatus'):\n"
            f"{json.dumps(_prompt_items(available_items), indent=2)}\n\n"
            "Respond with a JSON object whose optional keys "
            f"{', '.join(SUGGESTION_SLOTS)} hold item ids, plus a required 'reasoning' string. "
            "Omit a key when that category is not needed (a dress needs no top or bottom). "
            "If you suggest an item that needs ironing, mention it in the reasoning. "
            "Use only the data in this prompt."
        )
        try:
            raw = self._generate(prompt, json_output=True)
            payload = OutfitSuggestionPayload.model_validate_json(raw)
        except ValidationError as exc:
            LOGGER.error("Outfit suggestion failed schema validation", exc_info=exc)
            return OutfitSuggestion(reasoning=SUGGESTION_FAILURE_REASONING)
        except Exception as exc:
            LOGGER.error("Outfit suggestion request failed", exc_info=exc)
            return OutfitSuggestion(reasoning=SUGGESTION_FAILURE_REASONING)
        return payload.to_suggestion()

    @instrument_tool("categorize_image")
    def categorize_image(self, image: str, categories: Sequence[str]) -> str:
        decoded = decode_data_url(image)
        if decoded is None:
            LOGGER.error("Could not determine mime type from image data")
            return first_category(categories)
        mime_type, data = decoded
        prompt = (
            "Analyze the clothing item in this image. Which of the following categories does it best "
            f"fit into? Respond with only one category name from this list: {', '.join(categories)}."
        )
        try:
            answer = self._generate([{"mime_type": mime_type, "data": data}, prompt])
        except Exception as exc:
            LOGGER.error("Image categorisation request failed", exc_info=exc)
            return first_category(categories)
        return match_category(answer, categories)

    @instrument_tool("dominant_color")
    def dominant_color(self, image: str) -> str:
        decoded = decode_data_url(image)
        if decoded is None:
            LOGGER.error("Could not determine mime type from image data")
            return FALLBACK_COLOR
        mime_type, data = decoded
        prompt = (
            "Analyze the image of the clothing item and determine its single dominant color. "
            "Respond with ONLY the hex color code (e.g., #RRGGBB)."
        )
        try:
            answer = self._generate([{"mime_type": mime_type, "data": data}, prompt])
        except Exception as exc:
            LOGGER.error("Dominant color request failed", exc_info=exc)
            return FALLBACK_COLOR
        return match_color(answer)


class MockStyleAdvisor(StyleAdvisor):
    """Offline deterministic advisor used without an API key and in tests."""

    def suggest_outfit(self, occasion: str, available_items: Sequence[ClothingItem]) -> OutfitSuggestion:
        if not available_items:
            return OutfitSuggestion(reasoning="No clothes are available in your wardrobe.")

        def find(category: str) -> Optional[ClothingItem]:
            return next((item for item in available_items if item.category.lower() == category), None)

        suggestion = OutfitSuggestion(
            reasoning=(
                f'This is a sample outfit for a "{occasion}" occasion. As AI features are not configured '
                "with an API key, we've picked a few items for you from your wardrobe."
            )
        )
        top, bottom, dress = find("top"), find("bottom"), find("dress")
        if top or bottom:
            suggestion.top = top.item_id if top else None
            suggestion.bottom = bottom.item_id if bottom else None
        elif dress:
            suggestion.dress = dress.item_id
        for slot in ("shoes", "outerwear", "accessory"):
            match = find(slot)
            if match:
                setattr(suggestion, slot, match.item_id)

        if not suggestion.item_ids():
            first = available_items[0]
            slot = first.category.lower() if first.category.lower() in SUGGESTION_SLOTS else "top"
            setattr(suggestion, slot, first.item_id)
            suggestion.reasoning = (
                "This is a sample suggestion. As AI features are not configured with an API key, "
                "we picked one of your available items."
            )
        return suggestion

    @staticmethod
    def _bucket(image: str, size: int) -> int:
        digest = hashlib.sha256((image or "").encode("utf-8")).hexdigest()
        return int(digest[:8], 16) % size

    def categorize_image(self, image: str, categories: Sequence[str]) -> str:
        if not categories:
            return first_category(categories)
        return categories[self._bucket(image, len(categories))]

    def dominant_color(self, image: str) -> str:
        return MOCK_PALETTE[self._bucket(image, len(MOCK_PALETTE))]


def build_style_advisor(api_key: str | None, model_name: str, timeout_seconds: float = 20.0) -> StyleAdvisor:
    if not api_key:
        LOGGER.warning("GOOGLE_API_KEY not set; using the mock style advisor")
        return MockStyleAdvisor()
    return GeminiStyleAdvisor(api_key=api_key, model_name=model_name, timeout_seconds=timeout_seconds)


__all__ = [
    "FALLBACK_COLOR",
    "GeminiStyleAdvisor",
    "MockStyleAdvisor",
    "StyleAdvisor",
    "build_style_advisor",
    "decode_data_url",
    "match_category",
    "match_color",
]
