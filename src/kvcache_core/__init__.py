"""Core contracts, models, settings, and errors for kvcache-memcached."""
