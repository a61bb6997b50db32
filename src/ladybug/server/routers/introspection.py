"""Introspection router — listing, status, health and stats under the API prefix.

Endpoints (``<prefix>`` defaults to ``/api``):
    GET <prefix>/info    — routes grouped by category + summary
    GET <prefix>/docs    — alias of /info
    GET <prefix>/status  — online marker, uptime, memory, route count
    GET <prefix>/health  — healthy marker for load balancers
    GET <prefix>/stats   — counts per category / method
    GET <prefix>/errors  — route modules that failed to load

Nothing here mutates state; every response is computed from the registry
on each call.
"""

from __future__ import annotations

import platform
import sys
import time

from fastapi import APIRouter

from ladybug.core.settings import Settings
from ladybug.modules.base import utc_timestamp
from ladybug.modules.registry import RouteRegistry
from ladybug.server.envelope import Envelope

try:
    import resource
except ImportError:  # Windows
    resource = None


def memory_usage() -> dict:
    """Peak resident set size of this process, in bytes."""
    if resource is None:
        return {}
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports KiB, macOS reports bytes
    if sys.platform != "darwin":
        max_rss *= 1024
    return {"maxRss": max_rss}


class Uptime:
    def __init__(self) -> None:
        self.started = time.monotonic()

    def seconds(self) -> float:
        return round(time.monotonic() - self.started, 3)


def build_router(
    *,
    prefix: str,
    registry: RouteRegistry,
    settings: Settings,
    envelope: Envelope,
    uptime: Uptime,
) -> APIRouter:
    """Return the introspection router bound to *registry* and *settings*."""
    router = APIRouter(prefix=prefix, tags=["introspection"])

    @router.get("/info")
    @router.get("/docs", include_in_schema=False)
    async def info():
        categories = registry.categories()
        body = {
            "framework": settings.name,
            "version": settings.version,
            "developer": settings.operator,
            "description": settings.description,
            "categories": categories,
            "summary": {
                "totalEndpoints": registry.total_routes,
                "totalCategories": len(categories),
                "loadErrors": len(registry.load_errors),
                "serverUptime": uptime.seconds(),
            },
            "links": settings.links,
            "notifications": settings.notifications,
        }
        if settings.header.status:
            body["status"] = settings.header.status
        return envelope.render(body)

    @router.get("/status")
    async def status():
        return envelope.render(
            {
                "status": "online",
                "framework": settings.name,
                "version": settings.version,
                "developer": settings.operator,
                "uptime": uptime.seconds(),
                "memory": memory_usage(),
                "totalEndpoints": registry.total_routes,
                "timestamp": utc_timestamp(),
            }
        )

    @router.get("/health")
    async def health():
        """Always 200 while the process is serving requests."""
        return envelope.render(
            {
                "status": "healthy",
                "message": "Ladybug APIs are buzzing smoothly!",
                "uptime": uptime.seconds(),
                "memory": memory_usage(),
                "timestamp": utc_timestamp(),
                "version": settings.version,
            }
        )

    @router.get("/stats")
    async def stats():
        return envelope.render(
            {
                "framework": settings.name,
                "totalRoutes": registry.total_routes,
                "loadErrors": len(registry.load_errors),
                "categories": len(registry.category_names()),
                "totalCategories": len(registry.category_names()),
                "methods": registry.method_counts(),
                "uptime": uptime.seconds(),
                "pythonVersion": platform.python_version(),
                "developer": settings.operator,
            }
        )

    @router.get("/errors")
    async def errors():
        return envelope.render(
            {
                "total": len(registry.load_errors),
                "errors": [e.to_dict() for e in registry.load_errors],
            }
        )

    return router
