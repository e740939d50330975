"""JSON envelope codec for values stored in memcached."""

from __future__ import annotations

import json
import math
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from kvcache_core.constants import MAX_TTL_MS
from kvcache_core.exceptions import (
    InvalidEnvelopeError,
    MalformedEnvelopeError,
    SerializationError,
)
from kvcache_core.models.cache import Envelope


def _now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def encode_envelope(
    value: Any,  # noqa: ANN401
    ttl: float,
    now: Callable[[], int] = _now_ms,
) -> str:
    """Wrap value with its storage time and ttl, serialized as JSON.

    Raises:
        SerializationError: If ttl is too large or value is not JSON-serializable.
            The serializer's own message is kept as the error message.
    """
    if ttl > MAX_TTL_MS:
        msg = f"Invalid ttl (greater than {MAX_TTL_MS})"
        raise SerializationError(msg)

    envelope = {"item": value, "stored": now(), "ttl": ttl}
    try:
        return json.dumps(envelope, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def decode_envelope(raw: str | bytes | None) -> Envelope | None:
    """Parse a stored envelope; None means a cache miss.

    Raises:
        MalformedEnvelopeError: If raw is not valid JSON.
        InvalidEnvelopeError: If raw parses but lacks item or a stored time.
    """
    if raw is None:
        return None

    try:
        data = json.loads(raw)
    except ValueError as exc:
        msg = "Bad envelope content"
        raise MalformedEnvelopeError(msg) from exc

    # stored == 0 is rejected along with a missing stored time
    if not isinstance(data, dict) or "item" not in data or not data.get("stored"):
        msg = "Incorrect envelope structure"
        raise InvalidEnvelopeError(msg)

    try:
        return Envelope.model_validate(data, strict=True)
    except ValidationError as exc:
        msg = "Incorrect envelope structure"
        raise InvalidEnvelopeError(msg) from exc


def ttl_to_seconds(ttl: float) -> int:
    """Convert a ttl in milliseconds to memcached's exptime, never below 1s."""
    return max(1, math.floor(ttl / 1000))
