"""Memcached cache engine: settings-driven connection, key and envelope codecs."""

from kvcache_infra.memcached.connection import ConnectionManager
from kvcache_infra.memcached.engine import MemcachedEngine
from kvcache_infra.memcached.envelope import decode_envelope, encode_envelope, ttl_to_seconds
from kvcache_infra.memcached.keys import generate_key
from kvcache_infra.memcached.namespace import validate_segment_name
from kvcache_infra.memcached.transport import AiomcacheTransport

__all__ = [
    "AiomcacheTransport",
    "ConnectionManager",
    "MemcachedEngine",
    "decode_envelope",
    "encode_envelope",
    "generate_key",
    "ttl_to_seconds",
    "validate_segment_name",
]
