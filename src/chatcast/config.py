"""Project configuration models and YAML loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from chatcast.broadcast import DEFAULT_CAPACITY


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000


class HubSettings(BaseModel):
    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)


class StreamSettings(BaseModel):
    retry_ms: int | None = Field(default=1500, ge=0)


class LoggingSettings(BaseModel):
    level: str = "INFO"


class AppSettings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    hub: HubSettings = Field(default_factory=HubSettings)
    stream: StreamSettings = Field(default_factory=StreamSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_settings(config_path: str | Path | None = None) -> AppSettings:
    """Load YAML configuration into typed app settings."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        return AppSettings()

    with path.open("r", encoding="utf-8") as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    return AppSettings.model_validate(raw)
