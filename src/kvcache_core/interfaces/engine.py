"""Abstract cache engine interface used by cache orchestrators."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from kvcache_core.models.cache import CacheKey, Envelope


@runtime_checkable
class CacheEngine(Protocol):
    """Capability set every cache engine offers; implementations can be swapped."""

    async def start(self) -> None:
        """Connect to the backend. Safe to call repeatedly."""
        ...

    async def stop(self) -> None:
        """Disconnect from the backend. A no-op when not connected."""
        ...

    def is_ready(self) -> bool:
        """Return True while the engine can serve requests."""
        ...

    def validate_segment_name(self, name: str) -> None:
        """Raise if the segment name cannot be used with this backend."""
        ...

    async def get(self, key: CacheKey | Mapping[str, Any]) -> Envelope | None:
        """Fetch the envelope stored under key, or None on a miss."""
        ...

    async def set(
        self,
        key: CacheKey | Mapping[str, Any],
        value: Any,  # noqa: ANN401
        ttl: float,
    ) -> None:
        """Store value under key for ttl milliseconds."""
        ...

    async def drop(self, key: CacheKey | Mapping[str, Any]) -> None:
        """Remove key. Removing a missing key is not an error."""
        ...
