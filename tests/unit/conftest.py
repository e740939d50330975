"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from kvcache_core.config.settings import MemcachedSettings
from kvcache_infra.memcached.engine import MemcachedEngine
from tests.mocks.mock_settings import make_settings
from tests.mocks.mock_transport import InMemoryTransport, make_mock_transport


@pytest.fixture
def settings() -> MemcachedSettings:
    """Return default settings with short timeouts."""
    return make_settings()


@pytest.fixture
def mock_transport() -> MagicMock:
    """Return a mock transport whose calls all succeed."""
    return make_mock_transport()


@pytest.fixture
def memory_transport() -> InMemoryTransport:
    """Return an in-memory transport with a controllable clock."""
    return InMemoryTransport()


@pytest.fixture
def engine(settings: MemcachedSettings, mock_transport: MagicMock) -> MemcachedEngine:
    """Return an unstarted engine wired to the mock transport."""
    return MemcachedEngine(settings, transport_factory=lambda _: mock_transport)


@pytest.fixture
async def started_engine(engine: MemcachedEngine) -> MemcachedEngine:
    """Return an engine that has completed start()."""
    await engine.start()
    return engine
