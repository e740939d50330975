"""Integration test fixtures: a real memcached on localhost:11211."""

from __future__ import annotations

import logging
import socket
import time
import uuid
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from kvcache_infra.memcached.engine import MemcachedEngine

# ---------------------------------------------------------------------------
# Service health checks (with retry for CI container start-up)
# ---------------------------------------------------------------------------


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 5,
    delay: float = 1.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


_memcached_up = _tcp_reachable("localhost", 11211)

require_memcached = pytest.mark.skipif(
    not _memcached_up,
    reason="memcached not reachable on localhost:11211 (docker run -p 11211:11211 memcached)",
)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[MemcachedEngine, None]:
    """Started engine on a fresh partition so tests never see each other's keys."""
    if not _memcached_up:
        pytest.skip("memcached not available")

    engine = MemcachedEngine(location="127.0.0.1:11211", partition=f"it-{uuid.uuid4().hex[:8]}")
    await engine.start()
    yield engine
    await engine.stop()


# ---------------------------------------------------------------------------
# Logging cleanup
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Save and restore root logger handlers between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
