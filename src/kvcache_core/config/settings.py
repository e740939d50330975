"""Adapter settings using pydantic-settings."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvcache_core.constants import (
    DEFAULT_IDLE_MS,
    DEFAULT_POOL_SIZE,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_MS,
    SETTINGS_DEFAULTS,
)
from kvcache_core.exceptions import ConfigError


class MemcachedSettings(BaseSettings):
    """Resolved, immutable configuration for one memcached engine."""

    model_config = SettingsConfigDict(env_prefix="KVCACHE_MEMCACHED_", frozen=True)

    # --- Server ---
    location: str = Field(
        description="Memcached server address as host:port (input alias: server)",
    )
    partition: str = Field(
        default="",
        description="Prefix isolating this application's keys on a shared server",
    )

    # --- Transport tuning ---
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Per-operation timeout in milliseconds",
    )
    idle: int = Field(
        default=DEFAULT_IDLE_MS,
        ge=0,
        description="Idle timeout for pooled connections in milliseconds",
    )
    pool_size: int = Field(
        default=DEFAULT_POOL_SIZE,
        ge=1,
        description="Maximum connections held by the transport pool",
    )
    pool_minsize: int | None = Field(
        default=None,
        ge=1,
        description="Connections the pool keeps open (defaults to pool_size)",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer: 'console' for humans, 'json' for collectors",
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_location(cls, data: Any) -> Any:  # noqa: ANN401
        """Reject conflicting address forms and fold host/port into location."""
        if not isinstance(data, Mapping):
            return data

        options = dict(data)
        # An empty server or location means "not given"
        server = options.pop("server", None) or None
        if server is not None:
            if options.get("location"):
                msg = "Cannot specify both server and location when using memcached"
                raise ValueError(msg)
            options["location"] = server

        location = options.get("location") or None
        host = options.pop("host", None)
        port = options.pop("port", None)
        if location is not None and (host is not None or port is not None):
            msg = "Cannot specify both location and host/port when using memcached"
            raise ValueError(msg)

        if location is None:
            host = host if host is not None else SETTINGS_DEFAULTS["host"]
            port = port if port is not None else SETTINGS_DEFAULTS["port"]
            options["location"] = _normalize_address({"host": host, "port": port})
        else:
            options["location"] = _normalize_address(location)

        for name in ("timeout", "idle"):
            if options.get(name) is None:
                options[name] = SETTINGS_DEFAULTS[name]
        return options

    def server_address(self) -> tuple[str, int]:
        """Split location into the (host, port) pair the transport expects."""
        return split_address(self.location)


def resolve_settings(
    options: Mapping[str, Any] | None = None, **overrides: Any
) -> MemcachedSettings:
    """Merge user options with the defaults into a MemcachedSettings.

    Options passed as a mapping and as keyword arguments are combined, with
    keyword arguments winning. Environment variables prefixed with
    ``KVCACHE_MEMCACHED_`` fill fields that neither supplies.

    Raises:
        ConfigError: If the options conflict or fail validation.
    """
    merged = {**(options or {}), **overrides}
    try:
        return MemcachedSettings(**merged)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


def split_address(location: str) -> tuple[str, int]:
    """Parse ``host``, ``host:port`` or ``[v6addr]:port`` into (host, port)."""
    address = location.strip()
    if not address:
        msg = "Memcached server address is empty"
        raise ValueError(msg)

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            msg = f"Invalid memcached server address: {location}"
            raise ValueError(msg)
        port_text = rest[1:] if rest.startswith(":") else rest
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        # Plain hostname, or a bare IPv6 literal without a port
        host, port_text = address, ""

    if not host:
        msg = f"Invalid memcached server address: {location}"
        raise ValueError(msg)
    return host, _parse_port(port_text or DEFAULT_PORT, location)


def _normalize_address(value: object) -> str:
    """Collapse the accepted address forms into a single host:port string."""
    if isinstance(value, str):
        host, port = split_address(value)
    elif isinstance(value, Mapping):
        host = str(value.get("host") or SETTINGS_DEFAULTS["host"])
        port = _parse_port(value.get("port", DEFAULT_PORT), value)
    elif isinstance(value, Sequence):
        if len(value) == 2 and not isinstance(value[0], (Mapping, list, tuple)):
            if isinstance(value[1], int) or str(value[1]).isdigit():
                return _normalize_address({"host": value[0], "port": value[1]})
        if len(value) == 1:
            return _normalize_address(value[0])
        msg = "Multiple memcached servers are not supported; pass a single address"
        raise ValueError(msg)
    else:
        msg = f"Unsupported memcached server address: {value!r}"
        raise ValueError(msg)

    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _parse_port(value: object, source: object) -> int:
    """Convert a port value to int, rejecting anything outside 1-65535."""
    try:
        port = int(str(value))
    except ValueError:
        msg = f"Invalid memcached port in {source!r}"
        raise ValueError(msg) from None
    if not 0 < port < 65536:
        msg = f"Invalid memcached port in {source!r}"
        raise ValueError(msg)
    return port


def _format_validation_error(exc: ValidationError) -> str:
    """Render pydantic errors as plain text, unwrapping our own ValueErrors."""
    messages: list[str] = []
    for error in exc.errors():
        ctx_error = error.get("ctx", {}).get("error")
        if error["type"] == "value_error" and ctx_error is not None:
            messages.append(str(ctx_error))
        else:
            field = ".".join(str(part) for part in error["loc"])
            messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(messages)
