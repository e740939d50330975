"""Lifecycle of the memcached transport handle."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog
from aiomcache.exceptions import ClientException

from kvcache_core.exceptions import BackendConnectionError, NotReadyError
from kvcache_core.models.cache import ConnectionState
from kvcache_infra.memcached.transport import AiomcacheTransport

if TYPE_CHECKING:
    from kvcache_core.config.settings import MemcachedSettings
    from kvcache_core.interfaces.transport import MemcacheTransport

logger = structlog.get_logger()

TransportFactory = Callable[["MemcachedSettings"], "MemcacheTransport"]


class ConnectionManager:
    """Owns one transport handle and the ready/stopped state around it.

    ``start()`` is idempotent and safe to call concurrently: the first
    caller schedules a single start task and every caller that arrives
    while it is in flight awaits that same task, so at most one handle is
    ever opened. The task is shielded, so cancelling one waiting caller
    does not abort the start for the others.
    """

    def __init__(
        self,
        settings: MemcachedSettings,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """Initialize with resolved settings and an optional transport factory."""
        self._settings = settings
        self._transport_factory = transport_factory or AiomcacheTransport.from_settings
        self._transport: MemcacheTransport | None = None
        self._starting: asyncio.Task[None] | None = None
        self._state = ConnectionState.UNCONNECTED

    @property
    def state(self) -> ConnectionState:
        """Current lifecycle state."""
        return self._state

    @property
    def transport(self) -> MemcacheTransport:
        """The live transport handle.

        Raises:
            NotReadyError: If the connection is not ready.
        """
        if self._state is not ConnectionState.READY or self._transport is None:
            msg = "Connection is not ready"
            raise NotReadyError(msg)
        return self._transport

    def is_ready(self) -> bool:
        """Return True only while the connection is ready."""
        return self._state is ConnectionState.READY

    async def start(self) -> None:
        """Open and probe the transport unless a handle already exists.

        Raises:
            BackendConnectionError: If the server cannot be reached or fails
                the probe. The transport's message is kept verbatim and the
                original exception is chained as ``__cause__``.
        """
        if self._transport is not None:
            return
        if self._starting is None:
            self._state = ConnectionState.CONNECTING
            self._starting = asyncio.create_task(self._open())
        await asyncio.shield(self._starting)

    async def stop(self) -> None:
        """Close the transport if one is open. A no-op otherwise."""
        if self._starting is not None:
            # Let an in-flight start settle so its handle is not leaked
            await asyncio.wait({self._starting})

        if self._transport is None:
            return

        transport = self._transport
        self._transport = None
        self._state = ConnectionState.STOPPED
        await transport.close()
        logger.info("memcached_stopped", location=self._settings.location)

    async def _open(self) -> None:
        """Create the transport, probe it, and publish it on success."""
        logger.debug("memcached_connecting", location=self._settings.location)
        transport: MemcacheTransport | None = None
        try:
            transport = self._transport_factory(self._settings)
            version = await transport.version()
        except BaseException as exc:
            # Cancellation included: the handle is not published yet
            self._state = ConnectionState.UNCONNECTED
            if transport is not None:
                await transport.close()
            if isinstance(exc, (ClientException, OSError)):
                raise BackendConnectionError(str(exc) or type(exc).__name__) from exc
            raise
        finally:
            self._starting = None

        self._transport = transport
        self._state = ConnectionState.READY
        logger.info(
            "memcached_ready",
            location=self._settings.location,
            version=version,
            partition=self._settings.partition,
        )
