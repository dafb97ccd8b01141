"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/larder.db"),
        description="SQLite database location.",
    )
    user_id: str = Field(
        default="local",
        description="Owner identifier the SQLite adapters scope every row to.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    regenerate_debounce_seconds: float = Field(
        default=0.5,
        description="Quiet period before queued meal-plan changes trigger a regeneration.",
    )
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum retries of the last failed shopping-list operation.",
    )
    queue_window_days: int = Field(
        default=30,
        description="Number of days ahead of today whose meal plans feed the shopping list.",
    )

    model_config = ConfigDict(frozen=True)


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("LARDER_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (user_id := _env("LARDER_USER_ID")):
        payload["user_id"] = user_id
    if (log_level := _env("LARDER_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("LARDER_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (debounce := _env("LARDER_REGENERATE_DEBOUNCE_SECONDS")):
        try:
            payload["regenerate_debounce_seconds"] = float(debounce)
        except ValueError:
            pass
    if (max_retries := _env("LARDER_MAX_RETRY_ATTEMPTS")):
        try:
            payload["max_retry_attempts"] = int(max_retries)
        except ValueError:
            pass
    if (window := _env("LARDER_QUEUE_WINDOW_DAYS")):
        try:
            payload["queue_window_days"] = int(window)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
