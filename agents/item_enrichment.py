"""Agent that fills in category and dominant color for new item drafts."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Sequence

from logic.enrichment import AI_DISABLED, ItemDraft
from tools.style_advisor import StyleAdvisor
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)


class ItemEnrichmentAgent:
    """Runs the two image lookups independently and merges them into a draft.

    A failure of one lookup never blocks the other, and neither ever blocks
    the user from saving the draft by hand.
    """

    def __init__(self, advisor: StyleAdvisor, max_workers: int = 4) -> None:
        self.advisor = advisor
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="enrich")

    def _lookup_category(self, draft: ItemDraft, categories: Sequence[str]) -> bool:
        try:
            category = self.advisor.categorize_image(draft.image_url, categories)
        except Exception as exc:
            log_event(logger, logging.WARNING, "enrichment_failed", draft=draft.draft_id, field="category", error=str(exc))
            draft.mark_failed("category")
            return False
        return draft.apply_ai("category", category)

    def _lookup_color(self, draft: ItemDraft) -> bool:
        try:
            color = self.advisor.dominant_color(draft.image_url)
        except Exception as exc:
            log_event(logger, logging.WARNING, "enrichment_failed", draft=draft.draft_id, field="dominant_color", error=str(exc))
            draft.mark_failed("dominant_color")
            return False
        return draft.apply_ai("dominant_color", color)

    def enrich(self, draft: ItemDraft, categories: Sequence[str], enabled: bool = True) -> Dict[str, bool]:
        """Synchronously enrich ``draft``; returns which fields were applied."""

        if not enabled or not draft.image_url:
            draft.ai_status.update({"category": AI_DISABLED, "dominant_color": AI_DISABLED})
            return {"category": False, "dominant_color": False}

        with operation_context("agent:enrichment.enrich"):
            draft.mark_pending("category")
            draft.mark_pending("dominant_color")
            applied = {
                "category": self._lookup_category(draft, categories),
                "dominant_color": self._lookup_color(draft),
            }
            log_event(logger, logging.INFO, "enrichment_completed", draft=draft.draft_id, applied=applied)
            return applied

    def enrich_in_background(
        self, draft: ItemDraft, categories: Sequence[str], enabled: bool = True
    ) -> List[Future]:
        """Start both lookups and return their futures.

        The draft stays editable while they run; whatever the user edits in
        the meantime is kept when the results land.
        """

        if not enabled or not draft.image_url:
            draft.ai_status.update({"category": AI_DISABLED, "dominant_color": AI_DISABLED})
            return []
        draft.mark_pending("category")
        draft.mark_pending("dominant_color")
        categories = list(categories)
        return [
            self._executor.submit(self._lookup_category, draft, categories),
            self._executor.submit(self._lookup_color, draft),
        ]

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["ItemEnrichmentAgent"]
