"""Configuration helpers for the Wardrobe Planner app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_LAUNDRY_ALERT_DAYS = 5
DEFAULT_ALERT_INTERVAL_SECONDS = 60 * 60
DEFAULT_REMINDER_INTERVAL_SECONDS = 60
STORAGE_BACKENDS = ("json", "sqlite", "memory")


@dataclass
class AppConfig:
    """Configuration values for the wardrobe app.

    Everything has a local default so the app runs offline out of the box:
    without ``api_key`` the AI features fall back to the deterministic mock
    advisor, and the JSON backend keeps all collections in one file.
    """

    api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    storage_backend: str = "json"
    storage_path: Optional[str] = None
    laundry_alert_days: int = DEFAULT_LAUNDRY_ALERT_DAYS
    alert_interval_seconds: float = DEFAULT_ALERT_INTERVAL_SECONDS
    reminder_interval_seconds: float = DEFAULT_REMINDER_INTERVAL_SECONDS
    ai_timeout_seconds: float = 20.0
    environment: str | None = None

    def __post_init__(self) -> None:
        backend = (self.storage_backend or "json").strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(f"Unsupported storage backend {self.storage_backend!r}")
        self.storage_backend = backend
        if self.laundry_alert_days <= 0:
            raise ValueError("laundry_alert_days must be positive")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables, which win.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("WARDROBE_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        return cls(
            api_key=get_value("google_api_key") or None,
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            storage_backend=str(get_value("storage_backend", "json") or "json"),
            storage_path=get_value("storage_path"),
            laundry_alert_days=int(get_value("laundry_alert_days", str(DEFAULT_LAUNDRY_ALERT_DAYS))),
            alert_interval_seconds=float(
                get_value("alert_interval_seconds", str(DEFAULT_ALERT_INTERVAL_SECONDS))
            ),
            reminder_interval_seconds=float(
                get_value("reminder_interval_seconds", str(DEFAULT_REMINDER_INTERVAL_SECONDS))
            ),
            ai_timeout_seconds=float(get_value("ai_timeout_seconds", "20")),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config

    def default_storage_path(self) -> str:
        if self.storage_path:
            return self.storage_path
        if self.storage_backend == "sqlite":
            return "data/wardrobe.db"
        return "data/wardrobe.json"
