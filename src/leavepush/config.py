import json
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "leavepush"
    app_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Web Push
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:admin@example.com"
    push_timeout_s: float = 10.0
    push_ttl_s: int = 86_400
    icon_path: str = "/static/icon.svg"

    # Paths
    data_dir: str = Field(
        default="data",
        validation_alias=AliasChoices("data_dir", "LEAVEPUSH_DATA"),
        description="Directory for users.json and subscriptions.json",
    )

    # Logging
    log_level: str = "INFO"
    health_log_every: int = 30

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


_override: Settings | None = None


def get_settings() -> Settings:
    """Return the active settings instance."""
    if _override:
        return _override
    settings = Settings()
    return _load_config_file(settings)


def _load_config_file(settings: Settings) -> Settings:
    """Load and merge config.json from the data dir if it exists."""
    config_path = Path(settings.data_dir) / "config.json"
    if not config_path.exists():
        return settings

    try:
        data = json.loads(config_path.read_text())
        if not isinstance(data, dict):
            return settings

        if "data_dir" in data and isinstance(data["data_dir"], str):
            data["data_dir"] = str(Path(data["data_dir"]).expanduser())

        return settings.model_copy(update=data)
    except (json.JSONDecodeError, OSError):
        return settings


def override_settings(s: Settings | None) -> None:
    """Swap in a custom Settings (use None to reset)."""
    global _override  # noqa: PLW0603
    _override = s
