"""
conftest.py — Shared pytest fixtures for the unit test suite.
"""

import pytest

from ladybug.modules.loader import ModuleLoader
from ladybug.server.envelope import Envelope


@pytest.fixture
def envelope(settings):
    return Envelope(settings)


@pytest.fixture
def loader(envelope):
    """A development-mode loader mounting routes under ``/api``."""
    return ModuleLoader(prefix="/api", envelope=envelope)
