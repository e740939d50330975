"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog
import typer
from rich.console import Console

from kvcache_core.config.settings import MemcachedSettings, resolve_settings
from kvcache_core.exceptions import KVCacheError
from kvcache_core.models.cache import CacheKey, Envelope
from kvcache_infra.memcached.engine import MemcachedEngine
from kvcache_infra.observability import bind_engine_context, configure_logging

app = typer.Typer(
    name="kvcache",
    help="Inspect and edit envelopes stored by the memcached cache engine",
)
console = Console()
logger = structlog.get_logger()

T = TypeVar("T")


@app.callback()
def main(
    ctx: typer.Context,
    location: str | None = typer.Option(
        None, "--location", "-l", help="Memcached server as host:port (default 127.0.0.1:11211)"
    ),
    partition: str | None = typer.Option(None, "--partition", "-p", help="Key partition prefix"),
    timeout: int | None = typer.Option(None, "--timeout", help="Per-operation timeout in ms"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Resolve engine settings shared by every command."""
    options: dict[str, Any] = {}
    if location:
        options["location"] = location
    if partition is not None:
        options["partition"] = partition
    if timeout is not None:
        options["timeout"] = timeout
    if verbose:
        options["log_level"] = "DEBUG"

    try:
        settings = resolve_settings(options)
    except KVCacheError as exc:
        console.print(f"[red]Error:[/red] {exc}", style="bold")
        raise typer.Exit(code=1) from exc

    configure_logging(settings)
    bind_engine_context(settings.location, settings.partition)
    ctx.obj = settings


@app.command()
def ping(ctx: typer.Context) -> None:
    """Connect to the server and report whether it answers."""
    settings: MemcachedSettings = ctx.obj

    async def _ping(engine: MemcachedEngine) -> bool:
        return engine.is_ready()

    if _run(settings, _ping):
        console.print(f"[bold green]OK[/bold green] {settings.location} is ready")


@app.command()
def get(
    ctx: typer.Context,
    segment: str = typer.Argument(..., help="Segment name"),
    item_id: str = typer.Argument(..., metavar="ID", help="Item id within the segment"),
) -> None:
    """Print the envelope stored under SEGMENT/ID."""
    settings: MemcachedSettings = ctx.obj

    async def _get(engine: MemcachedEngine) -> Envelope | None:
        engine.validate_segment_name(segment)
        key = CacheKey(segment=segment, id=item_id)
        return await engine.get(key)

    envelope = _run(settings, _get)
    if envelope is None:
        console.print(f"[yellow]Not found:[/yellow] {segment}/{item_id}")
        raise typer.Exit(code=1)

    stored_at = datetime.fromtimestamp(envelope.stored / 1000, tz=UTC)
    console.print(f"[bold]Stored:[/bold] {stored_at.isoformat()}")
    console.print(f"[bold]TTL:[/bold] {envelope.ttl} ms")
    console.print_json(json.dumps(envelope.item))


@app.command("set")
def set_item(
    ctx: typer.Context,
    segment: str = typer.Argument(..., help="Segment name"),
    item_id: str = typer.Argument(..., metavar="ID", help="Item id within the segment"),
    value: str = typer.Argument(..., help="Value to store"),
    ttl: int = typer.Option(60_000, "--ttl", help="Lifetime in milliseconds"),
    as_json: bool = typer.Option(False, "--json", help="Parse VALUE as JSON before storing"),
) -> None:
    """Store VALUE under SEGMENT/ID."""
    settings: MemcachedSettings = ctx.obj
    item: Any = value
    if as_json:
        try:
            item = json.loads(value)
        except ValueError as exc:
            console.print(f"[red]Error:[/red] VALUE is not valid JSON: {exc}")
            raise typer.Exit(code=1) from exc

    async def _set(engine: MemcachedEngine) -> None:
        engine.validate_segment_name(segment)
        key = CacheKey(segment=segment, id=item_id)
        await engine.set(key, item, ttl)

    _run(settings, _set)
    console.print(f"[green]Stored[/green] {segment}/{item_id} for {ttl} ms")


@app.command()
def drop(
    ctx: typer.Context,
    segment: str = typer.Argument(..., help="Segment name"),
    item_id: str = typer.Argument(..., metavar="ID", help="Item id within the segment"),
) -> None:
    """Delete SEGMENT/ID. Deleting a missing item succeeds."""
    settings: MemcachedSettings = ctx.obj

    async def _drop(engine: MemcachedEngine) -> None:
        engine.validate_segment_name(segment)
        key = CacheKey(segment=segment, id=item_id)
        await engine.drop(key)

    _run(settings, _drop)
    console.print(f"[green]Dropped[/green] {segment}/{item_id}")


def _run(
    settings: MemcachedSettings,
    action: Callable[[MemcachedEngine], Awaitable[T]],
) -> T:
    """Run action against a started engine, exiting with code 1 on engine errors."""
    try:
        return asyncio.run(_with_engine(settings, action))
    except KVCacheError as exc:
        logger.debug("command_failed", error_type=type(exc).__name__)
        console.print(f"[red]Error:[/red] {exc}", style="bold")
        raise typer.Exit(code=1) from exc


async def _with_engine(
    settings: MemcachedSettings,
    action: Callable[[MemcachedEngine], Awaitable[T]],
) -> T:
    """Start an engine, run action, and always stop it afterwards."""
    engine = MemcachedEngine(settings)
    await engine.start()
    try:
        return await action(engine)
    finally:
        await engine.stop()


if __name__ == "__main__":
    app()
