"""Exceptions raised by wardrobe operations.

Every error leaves previously stored state untouched; callers report them to
the user instead of crashing.
"""

from __future__ import annotations

from typing import List, Sequence


class WardrobeError(Exception):
    """Base class for all domain errors."""


class ItemValidationError(WardrobeError, ValueError):
    """A submitted item is missing required fields or has invalid values."""

    def __init__(self, message: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields: List[str] = list(fields)


class CategoryError(WardrobeError, ValueError):
    """A category is unknown, empty, or already present."""


class UnknownItemError(WardrobeError, KeyError):
    """No item with the given id exists."""

    def __init__(self, item_id: str) -> None:
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Unknown item {self.item_id!r}"


class UnknownDraftError(UnknownItemError):
    """No open item draft with the given id; it was saved, discarded or never existed."""

    def __str__(self) -> str:
        return f"Unknown draft {self.item_id!r}"


class LaundryTransitionError(WardrobeError):
    """A laundry status change was requested from the wrong state."""

    def __init__(self, item_id: str, current: str, action: str) -> None:
        super().__init__(f"Cannot {action} item {item_id!r} while it is {current!r}")
        self.item_id = item_id
        self.current = current
        self.action = action


class PastDateError(WardrobeError):
    """Plans for dates before today are read-only."""

    def __init__(self, date_key: str) -> None:
        super().__init__(f"{date_key} is in the past and can no longer be planned")
        self.date_key = date_key


class ConfirmationRequired(WardrobeError):
    """Selected items need ironing and the user has not confirmed them yet."""

    def __init__(self, date_key: str, item_ids: Sequence[str]) -> None:
        super().__init__(
            f"Items {', '.join(item_ids)} need ironing; confirm before planning them for {date_key}"
        )
        self.date_key = date_key
        self.item_ids: List[str] = list(item_ids)


class ArchiveImportError(WardrobeError):
    """A bulk-import archive was unreadable or contained no images."""


__all__ = [
    "WardrobeError",
    "ItemValidationError",
    "CategoryError",
    "UnknownItemError",
    "UnknownDraftError",
    "LaundryTransitionError",
    "PastDateError",
    "ConfirmationRequired",
    "ArchiveImportError",
]
