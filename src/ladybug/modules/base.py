"""
modules/base.py — Route module metadata.

Every ``.py`` file under the api directory is a route module.  It must
expose a ``meta`` mapping and an ``on_start`` handler; the loader in
``modules/loader.py`` validates both and turns them into a
:class:`RouteModule`.

Minimal route module example::

    # api/example/hello.py
    meta = {
        "name": "Hello API",
        "path": "/example/hello",
        "method": "GET",
        "category": "Example",
    }

    async def on_start(ctx):
        ctx.res.json({"message": "Hello, world!"})
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ladybug.core.errors import ModuleLoadError

if TYPE_CHECKING:
    from ladybug.modules.dispatch import RouteContext

Handler = Callable[["RouteContext"], Awaitable[Any] | Any]

VALID_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")

_PARAM_SEGMENT_RE = re.compile(r":(\w+)")


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RouteModule:
    """Validated metadata + handler of a single route module."""

    path: str
    """Declared path, relative to the API prefix.  May carry a ``?query`` hint."""

    name: str
    """Human-readable endpoint name shown in the listing."""

    handler: Handler

    method: str = "GET"
    """Upper-case HTTP method."""

    description: str = "No description provided"
    category: str = "Uncategorized"
    author: str | None = None
    version: str = "1.0.0"
    tags: tuple[str, ...] = ()
    deprecated: bool = False
    rate_limit: Any = None
    """Opaque; shown in the listing, never enforced."""

    authentication: bool = False

    @classmethod
    def from_module(cls, module: Any) -> RouteModule:
        """Validate an imported module object.

        Checks run in order and stop at the first failure, raising
        :class:`ModuleLoadError` with a message naming the problem.
        """
        meta = getattr(module, "meta", None)
        if meta is None or not isinstance(meta, Mapping):
            raise ModuleLoadError("Missing or invalid meta object")

        handler = getattr(module, "on_start", None)
        if handler is None or not callable(handler):
            raise ModuleLoadError("Missing or invalid on_start function")

        path = meta.get("path")
        name = meta.get("name")
        if not path or not name or not isinstance(path, str) or not isinstance(name, str):
            raise ModuleLoadError("Missing required meta.path or meta.name")

        method = str(meta.get("method") or "get").lower()
        if method not in VALID_METHODS:
            raise ModuleLoadError(f"Invalid HTTP method: {method}")

        tags = meta.get("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)

        return cls(
            path=path,
            name=name,
            handler=handler,
            method=method.upper(),
            description=meta.get("description") or "No description provided",
            category=meta.get("category") or "Uncategorized",
            author=meta.get("author") or None,
            version=meta.get("version") or "1.0.0",
            tags=tuple(str(t) for t in tags),
            deprecated=bool(meta.get("deprecated", False)),
            rate_limit=meta.get("rateLimit"),
            authentication=bool(meta.get("authentication", False)),
        )

    @property
    def base_path(self) -> str:
        """Declared path without its query string, always starting with ``/``."""
        base = self.path.split("?", 1)[0]
        return base if base.startswith("/") else "/" + base

    @property
    def query(self) -> str:
        return self.path.split("?", 1)[1] if "?" in self.path else ""

    @property
    def router_path(self) -> str:
        """:attr:`base_path` with ``:param`` segments rewritten as ``{param}``."""
        return _PARAM_SEGMENT_RE.sub(r"{\1}", self.base_path)


@dataclass(frozen=True)
class RegisteredRoute:
    """A route module as mounted on the server.  Immutable once created."""

    name: str
    route_path: str
    """Public path the handler is mounted on, e.g. ``/api/example/hello``."""

    endpoint: str
    """:attr:`route_path` with the declared query string reattached."""

    method: str
    description: str
    category: str
    author: str
    version: str
    tags: tuple[str, ...] = ()
    deprecated: bool = False
    rate_limit: Any = None
    authentication: bool = False
    file: str = ""

    @classmethod
    def from_module(cls, module: RouteModule, prefix: str, *, default_author: str, file: str = "") -> RegisteredRoute:
        route_path = prefix + module.base_path
        return cls(
            name=module.name,
            route_path=route_path,
            endpoint=route_path + (f"?{module.query}" if module.query else ""),
            method=module.method,
            description=module.description,
            category=module.category,
            author=module.author or default_author,
            version=module.version,
            tags=module.tags,
            deprecated=module.deprecated,
            rate_limit=module.rate_limit,
            authentication=module.authentication,
            file=file,
        )

    def to_dict(self) -> dict:
        """Per-route metadata as shown by the listing endpoint."""
        return {
            "name": self.name,
            "description": self.description,
            "path": self.endpoint,
            "method": self.method,
            "author": self.author,
            "version": self.version,
            "tags": list(self.tags),
            "deprecated": self.deprecated,
            "rateLimit": self.rate_limit,
            "authentication": self.authentication,
        }


@dataclass(frozen=True)
class LoadError:
    """A route module file that could not be loaded."""

    file: str
    error: str
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return {"file": self.file, "error": self.error, "timestamp": self.timestamp}
