"""Key-value persistence for the app's collections."""
from __future__ import annotations

import copy
import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict

WARDROBE_KEY = "wardrobe"
INVENTORY_KEY = "inventory"
WEAR_LOG_KEY = "wearLog"
PLANNED_OUTFITS_KEY = "plannedOutfits"
CATEGORIES_KEY = "customCategories"
APP_SETTINGS_KEY = "appSettings"
NOTIFICATION_SETTINGS_KEY = "notificationSettings"
ONBOARDING_KEY = "isOnboardingComplete"

COLLECTION_KEYS = (
    WARDROBE_KEY,
    INVENTORY_KEY,
    WEAR_LOG_KEY,
    PLANNED_OUTFITS_KEY,
    CATEGORIES_KEY,
    APP_SETTINGS_KEY,
    NOTIFICATION_SETTINGS_KEY,
    ONBOARDING_KEY,
)


class CollectionStore:
    """Whole-value get/set storage; values are JSON-compatible."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def keys(self) -> list[str]:
        raise NotImplementedError


class InMemoryCollectionStore(CollectionStore):
    """Process-local store used by tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._values: Dict[str, Any] = copy.deepcopy(initial or {})
        self.write_count = 0

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return copy.deepcopy(default)
        return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)
        self.write_count += 1

    def keys(self) -> list[str]:
        return list(self._values)


class JSONCollectionStore(CollectionStore):
    """All collections in one JSON document, rewritten on every set."""

    def __init__(self, path: str | Path = "data/wardrobe.json") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text()
        return json.loads(raw) if raw.strip() else {}

    def _save(self, payload: Dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2))
        tmp_path.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        payload = self._load()
        if key not in payload:
            return copy.deepcopy(default)
        return payload[key]

    def set(self, key: str, value: Any) -> None:
        payload = self._load()
        payload[key] = value
        self._save(payload)

    def keys(self) -> list[str]:
        return list(self._load())


class SQLiteCollectionStore(CollectionStore):
    """SQLite-backed key/value table for lightweight durability."""

    def __init__(self, db_path: str | Path = "data/wardrobe.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL
                );
                """
            )

    def get(self, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM collections WHERE key = ?", (key,)).fetchone()
        if row is None:
            return copy.deepcopy(default)
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO collections(key, value, updated_at) VALUES (?, ?, ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, json.dumps(value), time.time()),
            )

    def keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM collections ORDER BY key").fetchall()
        return [row["key"] for row in rows]


def build_collection_store(backend: str, path: str | None = None) -> CollectionStore:
    if backend == "memory":
        return InMemoryCollectionStore()
    if backend == "sqlite":
        return SQLiteCollectionStore(path or "data/wardrobe.db")
    return JSONCollectionStore(path or "data/wardrobe.json")


__all__ = [
    "COLLECTION_KEYS",
    "CollectionStore",
    "InMemoryCollectionStore",
    "JSONCollectionStore",
    "SQLiteCollectionStore",
    "build_collection_store",
    "WARDROBE_KEY",
    "INVENTORY_KEY",
    "WEAR_LOG_KEY",
    "PLANNED_OUTFITS_KEY",
    "CATEGORIES_KEY",
    "APP_SETTINGS_KEY",
    "NOTIFICATION_SETTINGS_KEY",
    "ONBOARDING_KEY",
]
