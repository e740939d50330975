"""Settings for kvcache-memcached."""

from kvcache_core.config.settings import MemcachedSettings, resolve_settings

__all__ = ["MemcachedSettings", "resolve_settings"]
