"""Tests for observability/logging.py."""

from __future__ import annotations

import io
import json
import logging
import sys
from collections.abc import Generator

import pytest
import structlog
from structlog.contextvars import get_contextvars

from kvcache_infra.observability.logging import (
    _resolve_level,
    bind_engine_context,
    clear_engine_context,
    configure_logging,
)
from tests.mocks.mock_settings import make_settings


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Restore root logger handlers and structlog config after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
    clear_engine_context()
    structlog.reset_defaults()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_mode(self) -> None:
        """Console mode installs a single root handler."""
        configure_logging(make_settings(log_format="console"))
        assert len(logging.getLogger().handlers) == 1

    def test_json_mode_renders_json(self) -> None:
        """JSON mode formats stdlib records as JSON objects."""
        configure_logging(make_settings(log_format="json"))

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.getLogger().handlers[0].formatter)
        log = logging.getLogger("test_json_mode")
        log.addHandler(handler)
        log.setLevel(logging.INFO)
        log.info("memcached_ready")

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "memcached_ready"
        assert record["level"] == "info"
        assert record["logger"] == "test_json_mode"

    def test_writes_to_stderr(self) -> None:
        """Log output stays off stdout, which carries command output."""
        configure_logging(make_settings())
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr

    def test_sets_level(self) -> None:
        """The configured level is applied to the root logger."""
        configure_logging(make_settings(log_level="WARNING"))
        assert logging.getLogger().level == logging.WARNING

    def test_quiets_asyncio_debug(self) -> None:
        """asyncio stays at WARNING even when debugging the engine."""
        configure_logging(make_settings(log_level="DEBUG"))
        assert logging.getLogger("asyncio").level == logging.WARNING


@pytest.mark.unit
class TestEngineContext:
    """Tests for bind/clear engine context."""

    def test_bind_and_clear(self) -> None:
        """Location and partition are bound, then cleared."""
        bind_engine_context("127.0.0.1:11211", "app")
        assert get_contextvars() == {"memcached": "127.0.0.1:11211", "partition": "app"}
        clear_engine_context()
        assert get_contextvars() == {}

    def test_empty_partition_bound_as_none(self) -> None:
        """No partition is logged as null rather than an empty string."""
        bind_engine_context("127.0.0.1:11211", "")
        assert get_contextvars()["partition"] is None


@pytest.mark.unit
class TestResolveLevel:
    """Tests for _resolve_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
            ("debug", logging.DEBUG),
            ("unknown", logging.INFO),
        ],
    )
    def test_resolve_level(self, name: str, expected: int) -> None:
        """Level names resolve to correct logging constants."""
        assert _resolve_level(name) == expected
