"""
core/settings.py — Framework identity loaded from ``settings.json``.

The file is read exactly once at startup.  A missing, unreadable or
malformed file is never fatal: the condition is logged and
:data:`DEFAULT_SETTINGS` is used instead.

Example ``settings.json``::

    {
      "name": "LADYBUG BOT API",
      "version": "1.0.0",
      "description": "Auto-discovered API modules",
      "apiSettings": {"operator": "ladybug"},
      "header": {"status": "Online!"},
      "links": [{"name": "Source", "url": "https://example.com"}],
      "notifications": []
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ladybug.core.errors import SettingsError
from ladybug.core.logger import get_logger

log = get_logger("settings")


class ApiSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    operator: str = "ladybug"


class HeaderSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str | None = None


class Settings(BaseModel):
    """Read-only process-wide settings."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    name: str = "LADYBUG BOT API"
    version: str = "1.0.0"
    description: str = ""
    api_settings: ApiSettings = Field(default_factory=ApiSettings, alias="apiSettings")
    header: HeaderSettings = Field(default_factory=HeaderSettings)
    links: list[Any] = Field(default_factory=list)
    notifications: list[Any] = Field(default_factory=list)

    @property
    def operator(self) -> str:
        return self.api_settings.operator


DEFAULT_SETTINGS = Settings()


def read_settings(path: Path) -> Settings:
    """Parse *path*; raise :class:`SettingsError` on any failure."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SettingsError(f"{path} not found") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise SettingsError(f"cannot read {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise SettingsError(f"{path} must contain a JSON object")
    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise SettingsError(f"invalid settings in {path}: {exc.error_count()} error(s)") from exc


def load_settings(path: Path) -> Settings:
    """Load settings from *path*, falling back to the defaults."""
    try:
        settings = read_settings(path)
    except SettingsError as exc:
        if isinstance(exc.__cause__, FileNotFoundError):
            log.warning("settings.json not found at %s, using defaults", path)
        else:
            log.error("Error loading settings: %s, using defaults", exc)
        return DEFAULT_SETTINGS

    log.info("Loaded settings: %s v%s", settings.name, settings.version)
    return settings
