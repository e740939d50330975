"""Flat memcached key generation from structured cache keys."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from kvcache_core.constants import KEY_SAFE_CHARS
from kvcache_core.exceptions import InvalidKeyError
from kvcache_core.models.cache import CacheKey


def generate_key(key: CacheKey | Mapping[str, Any] | None, partition: str = "") -> str:
    """Build ``[partition:]segment:id`` with every part percent-encoded.

    Encoding each part separately escapes any ``:`` inside it, so two
    different (partition, segment, id) triples never share a key.

    Raises:
        InvalidKeyError: If key is missing or its segment/id are not strings.
    """
    segment, item_id = _unpack(key)
    generated = f"{_encode(segment)}:{_encode(item_id)}"
    if partition:
        generated = f"{_encode(partition)}:{generated}"
    return generated


def _unpack(key: CacheKey | Mapping[str, Any] | None) -> tuple[str, str]:
    """Pull segment and id out of a CacheKey or plain mapping."""
    if isinstance(key, CacheKey):
        return key.segment, key.id
    if not isinstance(key, Mapping):
        msg = f"Invalid cache key: expected a segment/id mapping, got {type(key).__name__}"
        raise InvalidKeyError(msg)

    segment = key.get("segment")
    item_id = key.get("id")
    if not isinstance(segment, str) or not segment:
        msg = "Invalid cache key: segment must be a non-empty string"
        raise InvalidKeyError(msg)
    if not isinstance(item_id, str):
        msg = "Invalid cache key: id must be a string"
        raise InvalidKeyError(msg)
    return segment, item_id


def _encode(part: str) -> str:
    """Percent-encode one key component."""
    return quote(part, safe=KEY_SAFE_CHARS)
