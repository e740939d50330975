"""Mock and in-memory memcached transports for engine tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from aiomcache.exceptions import ValidationException

from kvcache_core.constants import MAX_KEY_LENGTH


def make_mock_transport(**overrides: object) -> MagicMock:
    """Create a mock MemcacheTransport whose calls all succeed.

    Override any method's return value or side effect by passing an
    AsyncMock under the method name.
    """
    transport = MagicMock()
    transport.get = AsyncMock(return_value=None)
    transport.set = AsyncMock(return_value=True)
    transport.delete = AsyncMock(return_value=True)
    transport.version = AsyncMock(return_value="1.6.21")
    transport.close = AsyncMock()

    for name, value in overrides.items():
        setattr(transport, name, value)

    return transport


class InMemoryTransport:
    """Dict-backed MemcacheTransport that mimics memcached's key rules and expiry."""

    def __init__(self, clock: list[float] | None = None) -> None:
        """Initialize with an optional mutable one-element clock (seconds)."""
        self._clock = clock if clock is not None else [0.0]
        self.items: dict[str, tuple[bytes, float]] = {}
        self.closed = False

    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes unless missing or expired."""
        self._check_key(key)
        entry = self.items.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock[0] >= expires_at:
            del self.items[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value until the clock passes ttl_seconds from now."""
        self._check_key(key)
        self.items[key] = (value.encode("utf-8"), self._clock[0] + ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key, reporting whether it existed."""
        self._check_key(key)
        return self.items.pop(key, None) is not None

    async def version(self) -> str:
        """Return a fixed server version."""
        return "1.6.21"

    async def close(self) -> None:
        """Mark the transport closed."""
        self.closed = True

    def _check_key(self, key: str) -> None:
        """Reject keys memcached would refuse, as aiomcache does."""
        if not key or len(key) > MAX_KEY_LENGTH or any(c.isspace() for c in key):
            raise ValidationException("invalid key", key.encode())
