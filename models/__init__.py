"""Model package exports."""

from models.categories import DEFAULT_CATEGORIES
from models.clothing import *  # noqa: F401,F403
from models.errors import *  # noqa: F401,F403

__all__ = ["DEFAULT_CATEGORIES", "ClothingItem", "WornLogEntry", "PlannedOutfit"]
