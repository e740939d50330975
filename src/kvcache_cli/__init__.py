"""Command-line tools for kvcache-memcached."""
