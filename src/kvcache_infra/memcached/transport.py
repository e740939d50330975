"""aiomcache-backed implementation of MemcacheTransport."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import aiomcache

if TYPE_CHECKING:
    from kvcache_core.config.settings import MemcachedSettings

T = TypeVar("T")


class AiomcacheTransport:
    """Memcached client over an aiomcache connection pool.

    aiomcache speaks bytes and has no notion of per-call timeouts or idle
    connections, so this wrapper encodes keys and values as UTF-8, bounds
    every call by ``timeout`` and drops pooled connections that sat unused
    for longer than ``idle`` before reusing the pool.
    """

    def __init__(self, client: aiomcache.Client, timeout_ms: int, idle_ms: int = 0) -> None:
        """Initialize with an aiomcache client and tuning values in milliseconds."""
        self._client = client
        self._timeout_ms = timeout_ms
        self._idle_ms = idle_ms
        self._last_used: float | None = None

    @classmethod
    def from_settings(cls, settings: MemcachedSettings) -> AiomcacheTransport:
        """Open a pool against the configured server (connections are lazy)."""
        host, port = settings.server_address()
        client = aiomcache.Client(
            host,
            port,
            pool_size=settings.pool_size,
            pool_minsize=settings.pool_minsize,
        )
        return cls(client, timeout_ms=settings.timeout, idle_ms=settings.idle)

    async def get(self, key: str) -> bytes | None:
        """Retrieve the raw stored bytes by key."""
        return await self._call("get", lambda: self._client.get(key.encode()))

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store a value with a lifetime in seconds."""
        return await self._call(
            "set",
            lambda: self._client.set(key.encode(), value.encode("utf-8"), exptime=ttl_seconds),
        )

    async def delete(self, key: str) -> bool:
        """Delete a key from the server."""
        return await self._call("delete", lambda: self._client.delete(key.encode()))

    async def version(self) -> str:
        """Return the server version string."""
        raw = await self._call("version", self._client.version)
        return raw.decode("utf-8", errors="replace")

    async def close(self) -> None:
        """Close all pooled connections."""
        await self._client.close()
        self._last_used = None

    async def _call(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run one client call under the configured timeout."""
        await self._drop_idle_connections()
        try:
            return await asyncio.wait_for(call(), timeout=self._timeout_ms / 1000)
        except TimeoutError as exc:
            # aiomcache returns the cancelled call's socket to the pool with
            # the reply still pending; drop the pool so it is never reused
            await self._client.close()
            msg = f"Memcached {operation} timed out after {self._timeout_ms}ms"
            raise TimeoutError(msg) from exc
        finally:
            self._last_used = asyncio.get_running_loop().time()

    async def _drop_idle_connections(self) -> None:
        """Close pooled connections unused for longer than the idle timeout."""
        if not self._idle_ms or self._last_used is None:
            return
        idle_for = asyncio.get_running_loop().time() - self._last_used
        if idle_for * 1000 > self._idle_ms:
            # aiomcache's close() only empties the pool; new calls reconnect
            await self._client.close()
