"""Rich display helpers — banner, route tables, status panels."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from ladybug.modules.base import LoadError, RegisteredRoute

# ── Ladybug colour palette ───────────────────────────────────────────────────
THEME = Theme(
    {
        "bug.pink": "#FF69B4",
        "bug.deep": "bold #FF1493",
        "bug.gold": "bold #FFD700",
        "bug.sky": "#87CEEB",
        "bug.ok": "#32CD32",
        "bug.warn": "#FFA500",
        "bug.err": "#FF6B6B",
        "bug.muted": "dim",
    }
)

console = Console(theme=THEME, highlight=False)
err_console = Console(theme=THEME, stderr=True)

RULE = "═" * 39


def info(msg: str) -> None:
    console.print(f"[bug.sky]🐞[/bug.sky] {msg}")


def ok(msg: str) -> None:
    console.print(f"[bug.ok]✓[/bug.ok] {msg}")


def warn(msg: str) -> None:
    console.print(f"[bug.warn]⚠[/bug.warn] {msg}")


def err(msg: str) -> None:
    err_console.print(f"[bug.err]✗[/bug.err] {msg}")


def print_banner(name: str, version: str, developer: str, base_url: str, prefix: str) -> None:
    """Print the startup banner with the introspection links."""
    console.print(f"[bug.deep]🐞 {RULE}[/bug.deep]")
    console.print("[bug.deep]🐞    LADYBUG API FRAMEWORK STARTING[/bug.deep]")
    console.print(f"[bug.deep]🐞 {RULE}[/bug.deep]")
    console.print(f"[bug.ok]🐞 Framework:[/bug.ok] {name}")
    console.print(f"[bug.ok]🐞 Version:[/bug.ok]   {version}")
    console.print(f"[bug.ok]🐞 Developer:[/bug.ok] {developer}")
    console.print(f"[bug.sky]🐞 📚 Listing:     {base_url}{prefix}/info[/bug.sky]")
    console.print(f"[bug.sky]🐞 🔍 Status:      {base_url}{prefix}/status[/bug.sky]")
    console.print(f"[bug.sky]🐞 ❤️  Health:      {base_url}{prefix}/health[/bug.sky]")
    console.print(f"[bug.sky]🐞 📊 Statistics:  {base_url}{prefix}/stats[/bug.sky]")
    console.print(f"[bug.deep]🐞 {RULE}[/bug.deep]")


# ── Routes ────────────────────────────────────────────────────────────────────


def print_routes(routes: tuple[RegisteredRoute, ...]) -> None:
    if not routes:
        console.print("[bug.muted]  No route modules found.[/bug.muted]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bug.gold", padding=(0, 1))
    table.add_column("Method", style="bug.pink", no_wrap=True, width=8)
    table.add_column("Path", style="bug.sky")
    table.add_column("Name")
    table.add_column("Category", style="bug.muted")
    for route in routes:
        name = f"{route.name} [bug.warn](deprecated)[/bug.warn]" if route.deprecated else route.name
        table.add_row(route.method, route.endpoint, name, route.category)
    console.print(table)


def print_load_errors(errors: tuple[LoadError, ...]) -> None:
    if not errors:
        return
    table = Table(box=box.SIMPLE, show_header=True, header_style="bug.err", padding=(0, 2))
    table.add_column("File", style="bug.muted")
    table.add_column("Error", style="bug.err")
    for e in errors:
        table.add_row(e.file, e.error)
    console.print(Panel(table, title=f"[bug.err]Load errors ({len(errors)})[/bug.err]", border_style="bug.err"))


# ── Remote status ─────────────────────────────────────────────────────────────


def print_mapping(title: str, data: dict, *, healthy: bool = True) -> None:
    """Render a flat JSON object as a two-column panel."""
    color = "bug.ok" if healthy else "bug.err"
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column(style="bug.muted", no_wrap=True)
    table.add_column()
    for key, value in data.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items()) or "-"
        table.add_row(key, str(value))
    console.print(Panel(table, title=f"[{color}]{title}[/{color}]", border_style=color, padding=(1, 2)))
