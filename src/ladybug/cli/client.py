"""Thin httpx client for a running ladybug server's introspection endpoints."""

from __future__ import annotations

import httpx


class LadybugAPIError(Exception):
    """Raised when the server is unreachable or answers with an error."""


class Client:
    """Reads ``<prefix>/status``, ``/health``, ``/stats`` and ``/info``."""

    def __init__(self, base_url: str = "http://localhost:4000", prefix: str = "/api", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def get(self, name: str) -> dict:
        try:
            r = self._http.get(f"{self.prefix}/{name}")
        except httpx.HTTPError as exc:
            raise LadybugAPIError(f"cannot reach {self.base_url}: {exc}") from exc
        if r.status_code >= 400:
            raise LadybugAPIError(f"GET {self.prefix}/{name} → {r.status_code}")
        return r.json()

    def status(self) -> dict:
        return self.get("status")

    def health(self) -> dict:
        return self.get("health")

    def stats(self) -> dict:
        return self.get("stats")

    def info(self) -> dict:
        return self.get("info")
