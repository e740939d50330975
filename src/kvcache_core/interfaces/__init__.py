"""Public interface re-exports for kvcache_core."""

from kvcache_core.interfaces.engine import CacheEngine
from kvcache_core.interfaces.transport import MemcacheTransport

__all__ = [
    "CacheEngine",
    "MemcacheTransport",
]
