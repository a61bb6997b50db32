"""
server/app.py — FastAPI application factory.

Startup modes:
  ladybug serve                                        → CLI (banner + uvicorn)
  uvicorn ladybug.server.app:create_app --factory     → plain uvicorn
  uvicorn ladybug.server.app:create_app --factory --reload
                                                       → dev mode with auto-reload

Route modules are discovered from the api directory by
``modules/loader.py``.  To add an endpoint:

  1. Create ``api/<category>/<name>.py``
  2. Define ``meta = {...}`` and ``async def on_start(ctx)``
  3. Restart. The route is mounted automatically.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles

from ladybug import __version__
from ladybug.core.config import ServerConfig
from ladybug.core.logger import QuietAccessFilter, configure, get_logger
from ladybug.core.settings import Settings, load_settings
from ladybug.modules.loader import ModuleLoader
from ladybug.server.envelope import Envelope
from ladybug.server.errors import install_error_handlers
from ladybug.server.middleware import RequestLogMiddleware, SecurityHeadersMiddleware
from ladybug.server.routers.introspection import Uptime, build_router

log = get_logger("server")

# ── Logging ────────────────────────────────────────────────────────────────────

_NOISY_PATHS = ("/health", "/status")

logging.getLogger("uvicorn.access").addFilter(QuietAccessFilter(_NOISY_PATHS))


# ── Application factory ────────────────────────────────────────────────────────


@asynccontextmanager
async def _lifespan(app: FastAPI):
    config: ServerConfig = app.state.config
    log.info("%s ready", app.state.settings.name)
    log.info("Listing: %s  Status: %s/status  Health: %s/health", config.listing_path, config.api_prefix, config.api_prefix)
    yield
    log.info("%s shutting down", app.state.settings.name)


def create_app(config: ServerConfig | None = None, settings: Settings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application.

    Route modules are loaded here, before the app starts serving, so the
    registry is complete and read-only by the time the first request lands.
    """
    configure()
    config = config or ServerConfig.from_env()
    settings = settings or load_settings(config.settings_file)
    envelope = Envelope(settings)
    uptime = Uptime()

    application = FastAPI(
        title=settings.name,
        description=settings.description,
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        lifespan=_lifespan,
    )
    application.add_middleware(RequestLogMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Route modules (auto-discovered) ───────────────────────────────────────
    log.info("Starting %s v%s (developer: %s)", settings.name, settings.version, settings.operator)
    loader = ModuleLoader(
        prefix=config.api_prefix,
        envelope=envelope,
        timeout=config.request_timeout,
        body_limit=config.body_limit,
        production=config.production,
    )
    registry = loader.load(config.api_dir)
    application.include_router(loader.router)
    log.info("Module loading complete: %d route(s)", registry.total_routes)
    if registry.load_errors:
        log.warning("Load errors: %d", len(registry.load_errors))

    # ── Introspection ─────────────────────────────────────────────────────────
    application.include_router(
        build_router(
            prefix=config.api_prefix,
            registry=registry,
            settings=settings,
            envelope=envelope,
            uptime=uptime,
        )
    )

    # ── Settings file and pages ───────────────────────────────────────────────
    @application.get("/settings.json", include_in_schema=False)
    async def settings_file():
        if not config.settings_file.is_file():
            raise StarletteHTTPException(404)
        return FileResponse(config.settings_file, headers={"Cache-Control": "no-cache"})

    @application.get("/", include_in_schema=False)
    async def index():
        return _page(config, "index.html")

    @application.get("/playground", include_in_schema=False)
    async def playground():
        return _page(config, "playground.html")

    if config.web_dir.is_dir():
        application.mount("/", StaticFiles(directory=config.web_dir), name="web")

    install_error_handlers(application, prefix=config.api_prefix, envelope=envelope, web_dir=config.web_dir)

    application.state.config = config
    application.state.settings = settings
    application.state.envelope = envelope
    application.state.registry = registry
    return application


def _page(config: ServerConfig, name: str) -> FileResponse:
    path = config.web_dir / name
    if not path.is_file():
        raise StarletteHTTPException(404)
    return FileResponse(path)
