"""Cache key, stored envelope, and connection state models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConnectionState(StrEnum):
    """Lifecycle states of a memcached connection."""

    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"  # start() in flight, shared by concurrent callers
    READY = "ready"
    STOPPED = "stopped"


class CacheKey(BaseModel):
    """Caller-side cache key; the partition comes from settings."""

    model_config = ConfigDict(frozen=True)

    segment: str = Field(min_length=1, description="Namespace grouping related keys, e.g. 'users'")
    id: str = Field(description="Opaque item identifier within the segment")


class Envelope(BaseModel):
    """A cached value wrapped with the time it was stored and its lifetime."""

    model_config = ConfigDict(frozen=True)

    item: Any = Field(description="The cached value, as passed to set()")
    stored: int = Field(description="Storage time in milliseconds since the epoch")
    ttl: int | float | None = Field(default=None, description="Requested lifetime in milliseconds")
