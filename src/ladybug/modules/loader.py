"""
modules/loader.py — Route module discovery.

Walks the api directory, imports every ``.py`` file as a route module,
validates it, and mounts its handler on a FastAPI router under the API
prefix.  A file that fails to import or validate is recorded as a
:class:`~ladybug.modules.base.LoadError` and skipped; it never stops the
scan.

Adding a new endpoint
---------------------
1. Create ``api/<category>/<name>.py``.
2. Define ``meta = {"name": ..., "path": ...}`` and ``async def on_start(ctx)``.
3. Restart the server; it is picked up automatically.
"""

from __future__ import annotations

import importlib.util
import os
import re
import sys
from pathlib import Path
from types import ModuleType

from fastapi import APIRouter

from ladybug.core.config import BODY_LIMIT_BYTES, REQUEST_TIMEOUT_S
from ladybug.core.errors import ModuleLoadError
from ladybug.core.logger import get_logger
from ladybug.modules.base import LoadError, RegisteredRoute, RouteModule
from ladybug.modules.dispatch import build_endpoint
from ladybug.modules.registry import RouteRegistry
from ladybug.server.envelope import Envelope

log = get_logger("loader")

SOURCE_SUFFIX = ".py"

_MODULE_NAME_RE = re.compile(r"\W")


class ModuleLoader:
    """Scans a directory tree and registers every valid route module."""

    def __init__(
        self,
        *,
        prefix: str,
        envelope: Envelope,
        router: APIRouter | None = None,
        timeout: float = REQUEST_TIMEOUT_S,
        body_limit: int = BODY_LIMIT_BYTES,
        production: bool = False,
    ) -> None:
        self.prefix = prefix
        self.envelope = envelope
        self.router = router if router is not None else APIRouter()
        self.timeout = timeout
        self.body_limit = body_limit
        self.production = production
        self.registry = RouteRegistry()

    def load(self, root: Path | str) -> RouteRegistry:
        """Load every route module under *root* and return the registry."""
        root = Path(root)
        if not root.is_dir():
            log.warning("API directory not found: %s", root)
            return self.registry
        self._walk(root)
        return self.registry

    def load_file(self, path: Path) -> RegisteredRoute | None:
        """Import, validate and mount one route module file."""
        try:
            module = self._import(path)
            route_module = RouteModule.from_module(module)
            route = RegisteredRoute.from_module(
                route_module,
                self.prefix,
                default_author=self.envelope.settings.operator,
                file=str(path),
            )
            self._mount(route_module, route)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            self.registry.add_error(LoadError(file=str(path), error=message))
            log.error("Failed to load %s: %s", path, message)
            return None

        self.registry.add_route(route)
        log.info("Loaded: %s [%s] %s", route.name, route.method, route.endpoint)
        return route

    # ── Internals ──────────────────────────────────────────────────────────────

    def _mount(self, route_module: RouteModule, route: RegisteredRoute) -> None:
        """Add *route* to the router; raises if the router rejects its path."""
        self.router.add_api_route(
            self.prefix + route_module.router_path,
            build_endpoint(
                route_module,
                route,
                envelope=self.envelope,
                timeout=self.timeout,
                body_limit=self.body_limit,
            ),
            methods=[route.method],
            name=route.name,
            summary=route.name,
            description=route.description,
            tags=[route.category],
            deprecated=route.deprecated or None,
            response_model=None,
        )

    def _walk(self, directory: Path) -> None:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.name.startswith((".", "_")):
                    continue
                if entry.is_dir():
                    self._walk(Path(entry.path))
                elif entry.is_file() and entry.name.endswith(SOURCE_SUFFIX):
                    self.load_file(Path(entry.path))

    def _import(self, path: Path) -> ModuleType:
        name = "_ladybug_route_" + _MODULE_NAME_RE.sub("_", str(path.resolve()))

        if self.production and name in sys.modules:
            return sys.modules[name]
        sys.modules.pop(name, None)

        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ModuleLoadError(f"Cannot import {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            if self.production:
                spec.loader.exec_module(module)
            else:
                # Compile from source: an edit within the same second that keeps
                # the file size would otherwise match a stale .pyc.
                code = spec.loader.source_to_code(spec.loader.get_data(str(path)), str(path))
                exec(code, module.__dict__)
        except Exception:
            sys.modules.pop(name, None)
            raise
        return module


def load_modules(root: Path | str, *, prefix: str, envelope: Envelope, **kwargs) -> tuple[APIRouter, RouteRegistry]:
    """Convenience wrapper: scan *root* and return ``(router, registry)``."""
    loader = ModuleLoader(prefix=prefix, envelope=envelope, **kwargs)
    registry = loader.load(root)
    return loader.router, registry
