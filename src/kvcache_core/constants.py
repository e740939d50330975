"""Shared constants for kvcache-memcached."""

from __future__ import annotations

from types import MappingProxyType

# Connection defaults, merged per construction and never mutated
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 11211
DEFAULT_TIMEOUT_MS = 1000
DEFAULT_IDLE_MS = 1000
DEFAULT_POOL_SIZE = 2

SETTINGS_DEFAULTS: MappingProxyType[str, object] = MappingProxyType(
    {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "timeout": DEFAULT_TIMEOUT_MS,
        "idle": DEFAULT_IDLE_MS,
    }
)

# memcached text protocol key ceiling (doc/protocol.txt, "Keys")
MAX_KEY_LENGTH = 250

# Largest ttl (ms) accepted by set(). Converted to seconds it stays below
# memcached's 30-day threshold where exptime turns into a unix timestamp.
MAX_TTL_MS = 2**31 - 1

# Punctuation kept verbatim in key components, on top of what
# urllib.parse.quote always keeps (alphanumerics and "_.-~")
KEY_SAFE_CHARS = "!*'()"
