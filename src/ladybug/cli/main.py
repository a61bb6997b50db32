"""
ladybug — CLI entry point.

Usage:
  ladybug serve [--port 4000] [--api-dir ./api] [--prefix /api] [--reload]
  ladybug routes [--api-dir ./api]        # scan offline, list routes + load errors
  ladybug status [--url http://localhost:4000] [--prefix /api]
  ladybug health
  ladybug stats
  ladybug info                             # endpoints of a running server
"""

from __future__ import annotations

import os
from pathlib import Path

import typer
import uvicorn

from . import __version__
from .client import Client, LadybugAPIError
from .display import console, err, info, ok, print_banner, print_load_errors, print_mapping, print_routes, warn

# ── App ───────────────────────────────────────────────────────────────────────

app = typer.Typer(
    name="ladybug",
    help="Ladybug API Framework CLI",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# ── Shared options ────────────────────────────────────────────────────────────

URL_OPT = typer.Option("http://localhost:4000", "--url", "-u", help="Ladybug server URL", envvar="LADYBUG_URL")
PREFIX_OPT = typer.Option(None, "--prefix", help="API prefix (default: $LADYBUG_API_PREFIX or /api)")
API_DIR_OPT = typer.Option(None, "--api-dir", help="Directory scanned for route modules")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Ladybug [bold]v{__version__}[/bold]")
        raise typer.Exit()


@app.callback()
def root(
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version and exit", is_eager=True, callback=_version_callback
    ),
) -> None:
    """[bold]Ladybug[/bold] — auto-discovered REST API host"""


def _apply_overrides(**overrides: str | None) -> None:
    """Export CLI overrides so the app factory (and reload workers) see them."""
    env_names = {
        "host": "HOST",
        "port": "PORT",
        "prefix": "LADYBUG_API_PREFIX",
        "api_dir": "LADYBUG_API_DIR",
        "settings": "LADYBUG_SETTINGS",
    }
    for key, value in overrides.items():
        if value is not None:
            os.environ[env_names[key]] = str(value)


# ── Subcommands ───────────────────────────────────────────────────────────────


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", "-p", help="Listening port"),
    prefix: str = PREFIX_OPT,
    api_dir: Path = API_DIR_OPT,
    settings: Path = typer.Option(None, "--settings", help="Path to settings.json"),
    reload: bool = typer.Option(False, "--reload/--no-reload", help="Restart on code changes"),
) -> None:
    """Load route modules and start the HTTP server."""
    from ladybug.core.config import ServerConfig
    from ladybug.core.settings import load_settings

    _apply_overrides(host=host, port=port, prefix=prefix, api_dir=api_dir, settings=settings)
    config = ServerConfig.from_env()
    cfg_settings = load_settings(config.settings_file)

    print_banner(
        cfg_settings.name,
        cfg_settings.version,
        cfg_settings.operator,
        f"http://localhost:{config.port}",
        config.api_prefix,
    )
    uvicorn.run(
        "ladybug.server.app:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=reload,
        log_level="info",
    )


@app.command()
def routes(
    prefix: str = PREFIX_OPT,
    api_dir: Path = API_DIR_OPT,
) -> None:
    """Scan the api directory without starting a server and list what loads."""
    from ladybug.core.config import ServerConfig
    from ladybug.core.settings import load_settings
    from ladybug.modules.loader import ModuleLoader
    from ladybug.server.envelope import Envelope

    _apply_overrides(prefix=prefix, api_dir=api_dir)
    config = ServerConfig.from_env()
    loader = ModuleLoader(prefix=config.api_prefix, envelope=Envelope(load_settings(config.settings_file)))
    registry = loader.load(config.api_dir)

    print_routes(registry.routes)
    print_load_errors(registry.load_errors)
    if registry.load_errors:
        warn(f"{registry.total_routes} route(s) loaded, {len(registry.load_errors)} failed")
        raise typer.Exit(1)
    ok(f"{registry.total_routes} route(s) loaded from [bold]{config.api_dir}[/bold]")


def _remote(url: str, name: str, prefix: str | None) -> dict:
    from ladybug.core.config import DEFAULT_API_PREFIX, normalize_prefix

    prefix = normalize_prefix(prefix or os.environ.get("LADYBUG_API_PREFIX", DEFAULT_API_PREFIX))
    try:
        with Client(base_url=url, prefix=prefix) as client:
            return getattr(client, name)()
    except LadybugAPIError as exc:
        err(str(exc))
        info("Is the server running? Try: [bold]ladybug serve[/bold]")
        raise typer.Exit(1) from exc


@app.command()
def status(url: str = URL_OPT, prefix: str = PREFIX_OPT) -> None:
    """Show the server status."""
    data = _remote(url, "status", prefix)
    print_mapping("Ladybug Status", data, healthy=data.get("status") == "online")


@app.command()
def health(url: str = URL_OPT, prefix: str = PREFIX_OPT) -> None:
    """Check that the server is healthy."""
    data = _remote(url, "health", prefix)
    print_mapping("Ladybug Health", data, healthy=data.get("status") == "healthy")


@app.command()
def stats(url: str = URL_OPT, prefix: str = PREFIX_OPT) -> None:
    """Show route counts per category and method."""
    data = _remote(url, "stats", prefix)
    print_mapping("Ladybug Stats", data)


@app.command("info")
def info_command(url: str = URL_OPT, prefix: str = PREFIX_OPT) -> None:
    """List the endpoints a running server exposes, by category."""
    data = _remote(url, "info", prefix)
    print_mapping(
        "Ladybug Info",
        {"framework": data.get("framework"), "version": data.get("version"), **data.get("summary", {})},
    )
    for category in data.get("categories", []):
        console.print(f"[bug.gold]{category['name']}[/bug.gold] ({category['count']})")
        for item in category["items"]:
            console.print(f"  [bug.pink]{item['method']:<7}[/bug.pink] {item['path']}  {item['name']}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
