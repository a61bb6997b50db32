"""
modules/registry.py — In-memory record of loaded routes and load errors.

Filled once by :class:`~ladybug.modules.loader.ModuleLoader` while the app is
being built, then only read by the introspection endpoints.
"""

from __future__ import annotations

from collections import Counter

from ladybug.modules.base import LoadError, RegisteredRoute


class RouteRegistry:
    """Ordered list of :class:`RegisteredRoute` plus the :class:`LoadError` list."""

    def __init__(self) -> None:
        self._routes: list[RegisteredRoute] = []
        self._errors: list[LoadError] = []

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteRegistry(routes={len(self._routes)}, errors={len(self._errors)})"

    # ── Loading ────────────────────────────────────────────────────────────────

    def add_route(self, route: RegisteredRoute) -> None:
        self._routes.append(route)

    def add_error(self, error: LoadError) -> None:
        self._errors.append(error)

    # ── Queries ────────────────────────────────────────────────────────────────

    @property
    def routes(self) -> tuple[RegisteredRoute, ...]:
        return tuple(self._routes)

    @property
    def load_errors(self) -> tuple[LoadError, ...]:
        return tuple(self._errors)

    @property
    def total_routes(self) -> int:
        return len(self._routes)

    def category_names(self) -> list[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(r.category for r in self._routes))

    def categories(self) -> list[dict]:
        """Group routes by category: ``[{name, count, items}, …]``."""
        grouped: dict[str, dict] = {}
        for route in self._routes:
            entry = grouped.setdefault(route.category, {"name": route.category, "count": 0, "items": []})
            entry["items"].append(route.to_dict())
            entry["count"] += 1
        return list(grouped.values())

    def method_counts(self) -> dict[str, int]:
        """Histogram of routes per HTTP method."""
        return dict(Counter(r.method for r in self._routes))
