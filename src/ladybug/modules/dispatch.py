"""
modules/dispatch.py — Per-route request wrapper.

Each registered route module gets one endpoint built by
:func:`build_endpoint`.  The endpoint races the module's ``on_start``
handler against the request timeout:

  - handler responds first    → that response is sent
  - handler raises first      → 500 ``INTERNAL_ERROR`` (detail logged only)
  - timeout fires first       → 408 ``TIMEOUT``; the handler keeps running
                                but can no longer write (see :class:`Responder`)
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import json
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from ladybug.core.errors import ErrorCode, RequestBodyError, ResponseAlreadySentError, error_body
from ladybug.core.logger import get_logger

if TYPE_CHECKING:
    from ladybug.modules.base import RegisteredRoute, RouteModule
    from ladybug.server.envelope import Envelope

log = get_logger("dispatch")

_BODYLESS_METHODS = {"GET", "HEAD", "OPTIONS"}

# Handler tasks still running after their response went out
_pending: set[asyncio.Task] = set()


class Responder:
    """Holds the single response a handler is allowed to send.

    The first call to :meth:`json` or :meth:`send` commits the response;
    any later call raises :class:`ResponseAlreadySentError`.  Safe to call
    from sync handlers running in the threadpool.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self._loop = asyncio.get_running_loop()
        self._sent = asyncio.Event()
        self._lock = threading.Lock()
        self._committed = False
        self._kind = ""
        self._payload: Any = None

    @property
    def headers_sent(self) -> bool:
        return self._committed

    def status(self, status_code: int) -> Responder:
        self.status_code = status_code
        return self

    def set_header(self, name: str, value: str) -> Responder:
        self.headers[name] = value
        return self

    def json(self, data: Any, status_code: int | None = None) -> None:
        """Send *data* as JSON (dict bodies get the response envelope)."""
        self._commit("json", data, status_code)

    def send(self, response: Response) -> None:
        """Send a ready-made Starlette response untouched."""
        self._commit("raw", response, None)

    async def wait(self) -> None:
        await self._sent.wait()

    def build(self, envelope: Envelope) -> Response:
        if self._kind == "raw":
            response = self._payload
            for name, value in self.headers.items():
                response.headers[name] = value
            return response
        return envelope.render(self._payload, status_code=self.status_code, headers=self.headers)

    def _commit(self, kind: str, payload: Any, status_code: int | None) -> None:
        with self._lock:
            if self._committed:
                raise ResponseAlreadySentError("Cannot send a response: headers already sent")
            self._committed = True
            self._kind = kind
            self._payload = payload
            if status_code is not None:
                self.status_code = status_code

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._sent.set()
        else:
            self._loop.call_soon_threadsafe(self._sent.set)


@dataclass
class RouteContext:
    """Everything a route module handler receives."""

    request: Request
    res: Responder
    query: dict[str, str] = field(default_factory=dict)
    body: Any = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


async def read_body(request: Request, limit: int) -> Any:
    """Parse a JSON or url-encoded request body; ``{}`` when there is none."""
    if request.method in _BODYLESS_METHODS:
        return {}

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise RequestBodyError("Request body too large", 413, ErrorCode.PAYLOAD_TOO_LARGE)

    raw = await request.body()
    if len(raw) > limit:
        raise RequestBodyError("Request body too large", 413, ErrorCode.PAYLOAD_TOO_LARGE)
    if not raw:
        return {}

    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type == "application/json" or content_type.endswith("+json"):
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise RequestBodyError("Malformed JSON body", 400, ErrorCode.BAD_REQUEST) from exc
    if content_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(raw.decode("utf-8", errors="replace"), keep_blank_values=True))
    return {}


async def _invoke(handler, ctx: RouteContext) -> Any:
    if inspect.iscoroutinefunction(handler):
        return await handler(ctx)
    result = await run_in_threadpool(handler, ctx)
    if inspect.isawaitable(result):
        result = await result
    return result


def _respond_with_result(res: Responder, result: Any) -> None:
    if result is None:
        res.send(Response(status_code=204))
    elif isinstance(result, Response):
        res.send(result)
    else:
        res.json(result)


def _late_completion(name: str, task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if isinstance(exc, ResponseAlreadySentError):
        log.warning("%s tried to respond after its response was sent", name)
    elif exc is not None:
        log.error("Error in %s after its response was sent: %s", name, exc, exc_info=exc)
    else:
        log.debug("%s finished after its response was sent", name)


def build_endpoint(module: RouteModule, route: RegisteredRoute, *, envelope: Envelope, timeout: float, body_limit: int):
    """Return the Starlette endpoint that serves *module* at *route*."""

    async def endpoint(request: Request) -> Response:
        started = time.perf_counter()
        log.info("%s %s", route.method, route.route_path)

        try:
            body = await read_body(request, body_limit)
        except RequestBodyError as exc:
            log.warning("Rejected body for %s: %s", route.route_path, exc.message)
            return envelope.render(error_body(exc.message, exc.code), status_code=exc.status_code)

        res = Responder()
        ctx = RouteContext(
            request=request,
            res=res,
            query=dict(request.query_params),
            body=body,
            params=dict(request.path_params),
            headers=dict(request.headers),
        )

        task = asyncio.ensure_future(_invoke(module.handler, ctx))
        sent = asyncio.ensure_future(res.wait())
        try:
            await asyncio.wait({task, sent}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sent.cancel()

        if task.done() and not task.cancelled() and task.exception() is not None:
            exc = task.exception()
            log.error("Error in %s: %s", module.name, exc, exc_info=exc)
            if not res.headers_sent:
                res.status(500).json(error_body("Internal server error", ErrorCode.INTERNAL_ERROR))
        elif task.done() and not res.headers_sent:
            _respond_with_result(res, None if task.cancelled() else task.result())
        elif not res.headers_sent:
            log.warning("Timeout in %s after %.1fs", module.name, timeout)
            res.status(408).json(error_body("Request timeout", ErrorCode.TIMEOUT))

        if not task.done():
            _pending.add(task)
            task.add_done_callback(_pending.discard)
            task.add_done_callback(functools.partial(_late_completion, module.name))

        log.info("Completed %s in %.0fms", route.route_path, (time.perf_counter() - started) * 1000)
        return res.build(envelope)

    return endpoint
