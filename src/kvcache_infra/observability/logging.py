"""structlog setup for the engine and the kvcache CLI."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

if TYPE_CHECKING:
    from kvcache_core.config.settings import MemcachedSettings

# Libraries that log per-call detail at DEBUG
_NOISY_LOGGERS = ("asyncio",)


def configure_logging(settings: MemcachedSettings) -> None:
    """Route structlog and stdlib records through one stderr handler.

    Records go to stderr so command output on stdout stays machine-readable.
    Calling this again replaces the previous handler.
    """
    level = _resolve_level(settings.log_level)
    pre_chain = _shared_processors()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter(settings.log_format, pre_chain))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_engine_context(location: str, partition: str) -> None:
    """Bind the server location and partition to all subsequent log entries."""
    bind_contextvars(memcached=location, partition=partition or None)


def clear_engine_context() -> None:
    """Drop everything bound by bind_engine_context."""
    clear_contextvars()


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _build_formatter(
    log_format: str,
    pre_chain: list[structlog.types.Processor],
) -> structlog.stdlib.ProcessorFormatter:
    """Pick the JSON renderer for collectors, the console one otherwise."""
    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=pre_chain,
    )


def _resolve_level(level_name: str) -> int:
    """Map a level name, case-insensitively, to its int; unknown names mean INFO."""
    return logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)
