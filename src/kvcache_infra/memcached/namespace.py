"""Segment name rules imposed by memcached's key format."""

from __future__ import annotations

import re

from kvcache_core.constants import MAX_KEY_LENGTH
from kvcache_core.exceptions import InvalidNamespaceError

_WHITESPACE = re.compile(r"\s")


def validate_segment_name(name: str | None, partition: str = "") -> None:
    """Raise InvalidNamespaceError if name cannot prefix a memcached key.

    Keys in the text protocol may not contain control characters or
    whitespace, and are capped at 250 characters including the partition.
    """
    if not name:
        msg = "Empty string"
        raise InvalidNamespaceError(msg)

    if "\0" in name:
        msg = "Includes null character"
        raise InvalidNamespaceError(msg)

    if _WHITESPACE.search(name):
        msg = "Includes spacing character(s)"
        raise InvalidNamespaceError(msg)

    if len(name) + len(partition) > MAX_KEY_LENGTH:
        msg = f"Segment and partition name lengths exceeds {MAX_KEY_LENGTH} characters"
        raise InvalidNamespaceError(msg)
