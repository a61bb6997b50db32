"""App-level fixtures — the full FastAPI app driven through TestClient.

Each test builds an app over its own tmp api directory, so route modules
written by the test are what gets mounted.
Run: pytest tests/api/ -v
"""

import pytest
from fastapi.testclient import TestClient

from ladybug.core.config import ServerConfig
from ladybug.server.app import create_app


@pytest.fixture
def make_app(api_dir, settings, tmp_path):
    """``make_app(**config_overrides)`` → FastAPI app over :func:`api_dir`."""

    def _make(**overrides):
        fields = {
            "api_dir": api_dir,
            "settings_file": tmp_path / "settings.json",
            "web_dir": tmp_path / "web",
        }
        fields.update(overrides)
        return create_app(ServerConfig(**fields), settings=settings)

    return _make


@pytest.fixture
def make_client(make_app):
    """``make_client(**config_overrides)`` → started TestClient (lifespan run)."""
    clients = []

    def _make(**overrides):
        client = TestClient(make_app(**overrides), raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, hello_module):
    """Client for an app serving only the Hello API module."""
    return make_client()
