"""Observability: structured logging."""

from kvcache_infra.observability.logging import (
    bind_engine_context,
    clear_engine_context,
    configure_logging,
)

__all__ = [
    "bind_engine_context",
    "clear_engine_context",
    "configure_logging",
]
