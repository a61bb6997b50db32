"""Root test conftest — shared fixtures for all test suites.

Route-module trees are written into ``tmp_path`` so every test scans its
own directory.  Unit fixtures live in tests/unit/conftest.py, app-level
fixtures (TestClient) in tests/api/conftest.py.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# src/ is the Python root for the ladybug package
_SRC = Path(__file__).parent.parent / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from ladybug.core.settings import Settings  # noqa: E402

HELLO_BODY = "ctx.res.json({'message': 'Hello, world!'})"


def write_route(api_dir: Path, relpath: str, meta: dict | None, body: str = HELLO_BODY, *, extra: str = "") -> Path:
    """Write a route module file; ``meta=None`` omits the meta object."""
    path = api_dir / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [textwrap.dedent(extra).strip(), ""] if extra else []
    if meta is not None:
        lines.append(f"meta = {meta!r}")
    lines += ["", "", "async def on_start(ctx):"]
    lines += ["    " + line for line in textwrap.dedent(body).strip().splitlines()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def api_dir(tmp_path):
    """Empty directory to drop route modules into."""
    d = tmp_path / "api"
    d.mkdir()
    return d


@pytest.fixture
def settings():
    """Settings with recognisable identity fields."""
    return Settings.model_validate(
        {
            "name": "Test Ladybug",
            "version": "9.9.9",
            "description": "test instance",
            "apiSettings": {"operator": "tester"},
            "header": {"status": "Online!"},
            "links": [{"name": "Home", "url": "https://example.com"}],
        }
    )


@pytest.fixture
def hello_module(api_dir):
    """The canonical Hello API module under ``example/``."""
    return write_route(
        api_dir,
        "example/hello.py",
        {"path": "/example/hello", "name": "Hello API", "method": "GET", "category": "Example"},
    )


@pytest.fixture
def write_module(api_dir):
    """``write_module(relpath, meta, body=..., extra=...)`` inside :func:`api_dir`."""

    def _write(relpath: str, meta: dict | None, body: str = HELLO_BODY, *, extra: str = "") -> Path:
        return write_route(api_dir, relpath, meta, body, extra=extra)

    return _write
