"""HTTP middleware — security headers and request logging."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ladybug.core.config import FRAMEWORK_NAME
from ladybug.core.logger import get_logger

log = get_logger("http")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "X-Powered-By": FRAMEWORK_NAME,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp :data:`SECURITY_HEADERS` on every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log ``METHOD url - client`` for each incoming request."""

    async def dispatch(self, request: Request, call_next):
        client = request.client.host if request.client else "-"
        log.info("%s %s - %s", request.method, request.url.path, client)
        return await call_next(request)
