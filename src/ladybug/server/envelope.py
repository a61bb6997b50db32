"""Response envelope — standard fields merged into every JSON object body."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from starlette.responses import JSONResponse

from ladybug.core.config import FRAMEWORK_NAME
from ladybug.core.settings import Settings
from ladybug.modules.base import utc_timestamp

MARKER = "🐞"


class PrettyJSONResponse(JSONResponse):
    """JSONResponse rendered with two-space indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=2, default=str).encode("utf-8")


class Envelope:
    """Decorates handler output with framework identity.

    Precedence (later wins): ``{status: "success"}`` → envelope fields from
    settings → the handler's own fields.  Anything that is not a JSON object
    (lists, scalars, ``None``) passes through untouched.
    """

    def __init__(self, settings: Settings, framework: str = FRAMEWORK_NAME) -> None:
        self.settings = settings
        self.framework = framework

    def fields(self) -> dict:
        return {
            "developer": self.settings.operator,
            "framework": self.framework,
            "version": self.settings.version,
            "timestamp": utc_timestamp(),
            "ladybug": MARKER,
        }

    def apply(self, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        return {"status": "success", **self.fields(), **data}

    def render(self, data: Any, status_code: int = 200, headers: Mapping[str, str] | None = None) -> JSONResponse:
        """Build the one response for *data*; the only place bodies get enveloped."""
        return PrettyJSONResponse(self.apply(data), status_code=status_code, headers=dict(headers or {}))
