"""User-managed clothing categories.

Categories are free text chosen by the user. The set keeps its insertion order
and never holds two names that differ only by case; lookups are
case-insensitive and always answer with the user's own casing.
"""

from typing import List, Optional, Sequence

from models.errors import CategoryError

DEFAULT_CATEGORIES: List[str] = [
    "Top",
    "Bottom",
    "Dress",
    "Outerwear",
    "Shoes",
    "Accessory",
    "Nightsuit",
    "Hair Accessory",
    "Whites",
    "Bedsheets",
]

# Laundry loads that get their own "mark all as washed" action.
SEPARATE_WASH_CATEGORIES = ("Whites", "Bedsheets")
FALLBACK_CATEGORY = "Top"


def _normalize_key(value: str) -> str:
    return value.strip().lower()


def find_category(categories: Sequence[str], name: str) -> Optional[str]:
    """Return the stored spelling of ``name`` or ``None``."""

    key = _normalize_key(name or "")
    if not key:
        return None
    for category in categories:
        if _normalize_key(category) == key:
            return category
    return None


def validate_category(categories: Sequence[str], name: str) -> str:
    match = find_category(categories, name)
    if match is None:
        raise CategoryError(f"Unknown category {name!r}")
    return match


def add_category(categories: Sequence[str], name: str) -> List[str]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise CategoryError("Category name cannot be empty")
    if find_category(categories, cleaned) is not None:
        raise CategoryError(f"Category {cleaned!r} already exists")
    return [*categories, cleaned]


def delete_category(categories: Sequence[str], name: str) -> List[str]:
    key = _normalize_key(name or "")
    remaining = [category for category in categories if _normalize_key(category) != key]
    if len(remaining) == len(categories):
        raise CategoryError(f"Unknown category {name!r}")
    return remaining


def first_category(categories: Sequence[str]) -> str:
    return categories[0] if categories else FALLBACK_CATEGORY


__all__ = [
    "DEFAULT_CATEGORIES",
    "SEPARATE_WASH_CATEGORIES",
    "FALLBACK_CATEGORY",
    "find_category",
    "validate_category",
    "add_category",
    "delete_category",
    "first_category",
]
