"""Domain models for kvcache-memcached."""

from kvcache_core.models.cache import CacheKey, ConnectionState, Envelope

__all__ = [
    "CacheKey",
    "ConnectionState",
    "Envelope",
]
