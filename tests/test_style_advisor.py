"""Gemini advisor fallbacks with an injected fake model, and the mock advisor."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, List

import pytest

from tools.style_advisor import (
    FALLBACK_COLOR,
    NO_AVAILABLE_ITEMS_REASONING,
    SUGGESTION_FAILURE_REASONING,
    GeminiStyleAdvisor,
    MockStyleAdvisor,
    build_style_advisor,
    decode_data_url,
)

PIXEL = "data:image/jpg;base64,iVBORw0KGgo="
CATEGORIES = ["Shirt", "Pants", "Whites"]


class FakeModel:
    """Stands in for ``genai.GenerativeModel``; records every call."""

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[tuple[Any, dict]] = []

    def generate_content(self, contents: Any, **kwargs: Any) -> SimpleNamespace:
        self.calls.append((contents, kwargs))
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def _advisor(model: FakeModel) -> GeminiStyleAdvisor:
    return GeminiStyleAdvisor(model=model, timeout_seconds=3)


def test_decode_data_url_normalises_jpg() -> None:
    mime_type, data = decode_data_url(PIXEL)
    assert mime_type == "image/jpeg"
    assert data.startswith(b"\x89PNG")
    assert decode_data_url("https://example.com/shirt.jpg") is None


def test_category_is_matched_to_user_casing() -> None:
    model = FakeModel(text=" whites.\n")
    assert _advisor(model).categorize_image(PIXEL, CATEGORIES) == "Whites"

    image_part, prompt = model.calls[0][0]
    assert image_part["mime_type"] == "image/jpeg"
    assert "Shirt, Pants, Whites" in prompt
    assert model.calls[0][1]["request_options"] == {"timeout": 3}


def test_unknown_category_falls_back_to_first() -> None:
    assert _advisor(FakeModel(text="Spacesuit")).categorize_image(PIXEL, CATEGORIES) == "Shirt"
    assert _advisor(FakeModel(text="Spacesuit")).categorize_image(PIXEL, []) == "Top"


def test_invalid_color_falls_back_to_grey() -> None:
    assert _advisor(FakeModel(text="navy blue")).dominant_color(PIXEL) == FALLBACK_COLOR
    assert _advisor(FakeModel(text="#1A2b3C")).dominant_color(PIXEL) == "#1A2b3C"


def test_network_errors_fail_soft() -> None:
    advisor = _advisor(FakeModel(error=TimeoutError("deadline exceeded")))

    assert advisor.categorize_image(PIXEL, CATEGORIES) == "Shirt"
    assert advisor.dominant_color(PIXEL) == FALLBACK_COLOR


def test_non_data_url_never_reaches_the_model() -> None:
    model = FakeModel(text="Pants")
    advisor = _advisor(model)

    assert advisor.categorize_image("not-an-image", CATEGORIES) == "Shirt"
    assert advisor.dominant_color("not-an-image") == FALLBACK_COLOR
    assert model.calls == []


def test_suggestion_is_validated(make_item) -> None:
    items = [make_item("t1", "Top"), make_item("b1", "Bottom")]
    model = FakeModel(text=json.dumps({"reasoning": "Crisp and simple.", "top": "t1", "bottom": "b1", "extra": 1}))

    suggestion = _advisor(model).suggest_outfit("Office", items)

    assert suggestion.reasoning == "Crisp and simple."
    assert suggestion.item_ids() == ["t1", "b1"]
    prompt, kwargs = model.calls[0]
    assert '"Office"' in prompt and '"t1"' in prompt
    assert kwargs["generation_config"] == {"response_mime_type": "application/json"}


@pytest.mark.parametrize("text", ["not json", json.dumps({"top": "t1"}), ""])
def test_unusable_suggestion_returns_fixed_reasoning(make_item, text: str) -> None:
    suggestion = _advisor(FakeModel(text=text)).suggest_outfit("Office", [make_item("t1")])

    assert suggestion.reasoning == SUGGESTION_FAILURE_REASONING
    assert suggestion.item_ids() == []


def test_no_available_items_skips_the_model() -> None:
    model = FakeModel(text="{}")
    assert _advisor(model).suggest_outfit("Party", []).reasoning == NO_AVAILABLE_ITEMS_REASONING
    assert model.calls == []


def test_mock_advisor_is_deterministic() -> None:
    mock = MockStyleAdvisor()

    assert mock.categorize_image(PIXEL, CATEGORIES) == mock.categorize_image(PIXEL, CATEGORIES)
    assert mock.categorize_image(PIXEL, CATEGORIES) in CATEGORIES
    assert mock.dominant_color(PIXEL) == mock.dominant_color(PIXEL)
    assert mock.dominant_color(PIXEL).startswith("#")


def test_mock_suggestion_prefers_separates_then_dress(make_item) -> None:
    mock = MockStyleAdvisor()
    separates = [make_item("d", "Dress"), make_item("t", "Top"), make_item("s", "Shoes")]
    assert mock.suggest_outfit("Casual", separates).to_dict() == {
        "reasoning": mock.suggest_outfit("Casual", separates).reasoning,
        "top": "t",
        "shoes": "s",
    }

    assert mock.suggest_outfit("Party", [make_item("d", "Dress")]).dress == "d"
    assert mock.suggest_outfit("Party", [make_item("n", "Nightsuit")]).top == "n"


def test_builder_uses_mock_without_key() -> None:
    assert isinstance(build_style_advisor(None, "gemini-2.5-flash"), MockStyleAdvisor)
