"""Abstract memcached transport interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MemcacheTransport(Protocol):
    """Minimal key/value client the engine drives; implementations can be swapped."""

    async def get(self, key: str) -> bytes | None:
        """Retrieve the raw stored bytes by key, or None if not found."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store a raw value with a lifetime in seconds; False if refused."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key; False if it was not present."""
        ...

    async def version(self) -> str:
        """Return the server version. Used as a side-effect-free liveness probe."""
        ...

    async def close(self) -> None:
        """Close all pooled connections."""
        ...
