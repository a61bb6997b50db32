"""
core/config.py — Centralised path constants and environment defaults.

All other modules import paths from here rather than computing them from
__file__.  Environment-driven settings are gathered once into a
:class:`ServerConfig` that the app factory receives explicitly.

Usage::

    from ladybug.core.config import ServerConfig

    config = ServerConfig.from_env()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# ── Repository layout ──────────────────────────────────────────────────────────

PACKAGE_DIR: Path = Path(__file__).parent.parent    # …/src/ladybug/
SRC_DIR: Path = PACKAGE_DIR.parent                  # …/src/
REPO_ROOT: Path = SRC_DIR.parent                    # …/

# Route modules are discovered under this directory
API_DIR: Path = REPO_ROOT / "api"

# Framework identity (name, version, operator …)
SETTINGS_FILE: Path = REPO_ROOT / "settings.json"

# Landing page and fallback error pages
WEB_DIR: Path = REPO_ROOT / "web"

ENV_FILE: Path = REPO_ROOT / ".env"

# ── Defaults (overridable via env) ────────────────────────────────────────────

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 4000
DEFAULT_API_PREFIX: str = "/api"
REQUEST_TIMEOUT_S: float = 30.0
BODY_LIMIT_BYTES: int = 10 * 1024 * 1024

FRAMEWORK_NAME: str = "Ladybug API Framework"


def normalize_prefix(prefix: str) -> str:
    """Return *prefix* with exactly one leading slash and no trailing slash."""
    prefix = "/" + prefix.strip().strip("/")
    return "" if prefix == "/" else prefix


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide server configuration, read once at startup."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_prefix: str = DEFAULT_API_PREFIX
    api_dir: Path = API_DIR
    settings_file: Path = SETTINGS_FILE
    web_dir: Path = WEB_DIR
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    production: bool = False
    request_timeout: float = REQUEST_TIMEOUT_S
    body_limit: int = BODY_LIMIT_BYTES

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_prefix", normalize_prefix(self.api_prefix))
        object.__setattr__(self, "api_dir", Path(self.api_dir))
        object.__setattr__(self, "settings_file", Path(self.settings_file))
        object.__setattr__(self, "web_dir", Path(self.web_dir))

    @classmethod
    def from_env(cls, env_file: Path | None = ENV_FILE) -> ServerConfig:
        """Build a config from the process environment (after loading ``.env``)."""
        if env_file is not None:
            load_env_file(env_file)

        origins = os.environ.get("ALLOWED_ORIGINS", "")
        return cls(
            host=os.environ.get("HOST", DEFAULT_HOST),
            port=_int(os.environ.get("PORT"), DEFAULT_PORT),
            api_prefix=os.environ.get("LADYBUG_API_PREFIX", DEFAULT_API_PREFIX),
            api_dir=Path(os.environ.get("LADYBUG_API_DIR", str(API_DIR))),
            settings_file=Path(os.environ.get("LADYBUG_SETTINGS", str(SETTINGS_FILE))),
            web_dir=Path(os.environ.get("LADYBUG_WEB_DIR", str(WEB_DIR))),
            allowed_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
            production=os.environ.get("ENVIRONMENT", "").lower() == "production",
            request_timeout=_float(os.environ.get("LADYBUG_REQUEST_TIMEOUT"), REQUEST_TIMEOUT_S),
        )

    @property
    def listing_path(self) -> str:
        return f"{self.api_prefix}/info"


def load_env_file(env_file: Path) -> None:
    """Export KEY=VALUE lines from *env_file* without overriding the real environment."""
    if not env_file.exists():
        return
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            os.environ.setdefault(k.strip(), v.strip())


def _int(value: str | None, default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


def _float(value: str | None, default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default
