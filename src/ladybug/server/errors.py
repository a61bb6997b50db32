"""404 / 500 handlers.

Requests under the API prefix get a JSON error body; everything else gets
an HTML fallback page from the web directory.  Exception detail is logged,
never returned.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from ladybug.core.errors import ErrorCode, error_body
from ladybug.core.logger import get_logger
from ladybug.server.envelope import Envelope

log = get_logger("http")

_FALLBACK_PAGES = {
    404: "<!doctype html><title>404 Not Found</title><h1>404</h1><p>This page seems to have flown away.</p>",
    500: "<!doctype html><title>500 Server Error</title><h1>500</h1><p>Something went wrong.</p>",
}


def is_api_request(request: Request, prefix: str) -> bool:
    path = request.url.path
    return path == prefix or path.startswith(prefix + "/")


def fallback_page(web_dir: Path, status_code: int) -> HTMLResponse:
    page = web_dir / f"{status_code}.html"
    try:
        html = page.read_text(encoding="utf-8")
    except OSError:
        html = _FALLBACK_PAGES[status_code]
    return HTMLResponse(html, status_code=status_code)


def install_error_handlers(app: FastAPI, *, prefix: str, envelope: Envelope, web_dir: Path) -> None:
    """Register the not-found and server-error handlers on *app*."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code not in (404, 405):
            return await http_exception_handler(request, exc)

        client = request.client.host if request.client else "-"
        log.warning("404 Not Found: %s %s - %s", request.method, request.url.path, client)
        if is_api_request(request, prefix):
            body = error_body(
                "API endpoint not found",
                ErrorCode.NOT_FOUND,
                suggestion=f"Visit {prefix}/info for available endpoints",
            )
            return envelope.render(body, status_code=404)
        return fallback_page(web_dir, 404)

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception):
        log.error("Server Error: %s %s", request.method, request.url.path, exc_info=exc)
        if is_api_request(request, prefix):
            return envelope.render(error_body("Internal server error", ErrorCode.INTERNAL_ERROR), status_code=500)
        return fallback_page(web_dir, 500)
