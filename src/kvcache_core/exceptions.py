"""Custom exception hierarchy for kvcache-memcached."""

from __future__ import annotations


class KVCacheError(Exception):
    """Base exception for all kvcache-memcached errors."""


class ConfigError(KVCacheError):
    """Raised when the adapter settings are invalid or conflicting."""


class InvalidNamespaceError(KVCacheError):
    """Raised when a segment name cannot be used as a memcached key prefix."""


class InvalidKeyError(KVCacheError):
    """Raised when a cache key is missing or lacks a string segment/id."""


class NotReadyError(KVCacheError):
    """Raised when an operation is attempted before start() or after stop()."""


class EnvelopeError(KVCacheError):
    """Base for errors found while decoding a stored envelope."""


class MalformedEnvelopeError(EnvelopeError):
    """Raised when stored content cannot be parsed at all."""


class InvalidEnvelopeError(EnvelopeError):
    """Raised when stored content parses but lacks item or stored."""


class SerializationError(KVCacheError):
    """Raised when a value or ttl cannot be encoded into an envelope."""


class StorageError(KVCacheError):
    """Raised when the memcached transport fails a get, set, or delete."""


class BackendConnectionError(KVCacheError):
    """Raised when the memcached server is unreachable or fails the probe."""
