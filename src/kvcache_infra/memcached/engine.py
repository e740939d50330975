"""Memcached implementation of the CacheEngine capability set."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from aiomcache.exceptions import ClientException

from kvcache_core.config.settings import MemcachedSettings, resolve_settings
from kvcache_core.exceptions import StorageError
from kvcache_infra.memcached.connection import ConnectionManager
from kvcache_infra.memcached.envelope import decode_envelope, encode_envelope, ttl_to_seconds
from kvcache_infra.memcached.keys import generate_key
from kvcache_infra.memcached.namespace import validate_segment_name

if TYPE_CHECKING:
    from kvcache_core.models.cache import CacheKey, Envelope
    from kvcache_infra.memcached.connection import TransportFactory

# Failures raised by the transport during get/set/delete
_TRANSPORT_ERRORS = (ClientException, OSError)


class MemcachedEngine:
    """Cache engine storing JSON envelopes in a single memcached server.

    Settings are resolved at construction, so conflicting options fail
    here with ConfigError rather than at start(). Segment names are
    expected to go through validate_segment_name() once, when the caller
    binds a segment; get/set/drop do not re-check them.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | MemcachedSettings | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize with engine options and an optional transport factory."""
        if isinstance(options, MemcachedSettings):
            self.settings = options
        else:
            self.settings = resolve_settings(options, **overrides)
        self._connection = ConnectionManager(self.settings, transport_factory)

    async def start(self) -> None:
        """Connect and probe the server. Repeated calls are no-ops."""
        await self._connection.start()

    async def stop(self) -> None:
        """Disconnect from the server. A no-op when not connected."""
        await self._connection.stop()

    def is_ready(self) -> bool:
        """Return True while the engine can serve requests."""
        return self._connection.is_ready()

    def validate_segment_name(self, name: str) -> None:
        """Raise InvalidNamespaceError if name is unusable with this partition."""
        validate_segment_name(name, self.settings.partition)

    def generate_key(self, key: CacheKey | Mapping[str, Any]) -> str:
        """Return the memcached key for key under this engine's partition."""
        return generate_key(key, self.settings.partition)

    async def get(self, key: CacheKey | Mapping[str, Any]) -> Envelope | None:
        """Fetch and decode the envelope stored under key, or None on a miss.

        Raises:
            NotReadyError: If the engine is not started.
            InvalidKeyError: If key lacks a string segment/id.
            StorageError: If the transport fails.
            MalformedEnvelopeError: If the stored content is not JSON.
            InvalidEnvelopeError: If the stored JSON lacks item or stored.
        """
        transport = self._connection.transport
        cache_key = self.generate_key(key)
        try:
            raw = await transport.get(cache_key)
        except _TRANSPORT_ERRORS as exc:
            raise StorageError(str(exc)) from exc
        return decode_envelope(raw)

    async def set(
        self,
        key: CacheKey | Mapping[str, Any],
        value: Any,  # noqa: ANN401
        ttl: float,
    ) -> None:
        """Store value under key for ttl milliseconds (at least one second).

        Raises:
            NotReadyError: If the engine is not started.
            InvalidKeyError: If key lacks a string segment/id.
            SerializationError: If value or ttl cannot be encoded. Nothing is written.
            StorageError: If the transport fails or the server refuses the item.
        """
        transport = self._connection.transport
        cache_key = self.generate_key(key)
        payload = encode_envelope(value, ttl)
        try:
            stored = await transport.set(cache_key, payload, ttl_to_seconds(ttl))
        except _TRANSPORT_ERRORS as exc:
            raise StorageError(str(exc)) from exc
        if not stored:
            msg = "Failed to store item"
            raise StorageError(msg)

    async def drop(self, key: CacheKey | Mapping[str, Any]) -> None:
        """Delete key. Deleting a missing key is not an error.

        Raises:
            NotReadyError: If the engine is not started.
            InvalidKeyError: If key lacks a string segment/id.
            StorageError: If the transport fails.
        """
        transport = self._connection.transport
        cache_key = self.generate_key(key)
        try:
            await transport.delete(cache_key)
        except _TRANSPORT_ERRORS as exc:
            raise StorageError(str(exc)) from exc
