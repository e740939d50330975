"""Memcached-backed implementations of the kvcache_core contracts."""
