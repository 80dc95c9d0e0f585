"""
CLI for kvcache.

Operates on a namespace of the SQLite backend configured in settings.

Commands:
    kvcache set KEY VALUE - Store a value
    kvcache get KEY - Read a value and mark it recently used
    kvcache peek KEY - Read a value without touching recency
    kvcache remove KEY... - Remove entries
    kvcache keys - List entries in the namespace
    kvcache size - Show the namespace's footprint in bytes
    kvcache clear - Remove every entry in the namespace
    kvcache config - Show current configuration
    kvcache version - Print version
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, Optional, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from kvcache import __version__
from kvcache.backends.sqlite import SQLiteBackend
from kvcache.cache import Cache
from kvcache.config import Settings, clear_settings_cache, get_settings
from kvcache.exceptions import IllegalKeyError, KVCacheError
from kvcache.logging import log_context, setup_logging
from kvcache.types import CachePolicy

T = TypeVar("T")

app = typer.Typer(
    name="kvcache",
    help="Namespaced LRU cache on a SQLite key-value store",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


@dataclass
class CacheTarget:
    """Where and how CLI commands operate."""

    db_path: Path
    namespace: str
    policy: CachePolicy


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        return None


@app.callback()
def main_callback(
    ctx: typer.Context,
    namespace: Annotated[
        Optional[str],
        typer.Option("--namespace", "-n", help="Cache namespace"),
    ] = None,
    db: Annotated[
        Optional[Path],
        typer.Option("--db", help="SQLite database file"),
    ] = None,
    max_entries: Annotated[
        Optional[int],
        typer.Option("--max-entries", min=1, help="Maximum entries in the namespace"),
    ] = None,
    max_size: Annotated[
        Optional[int],
        typer.Option("--max-size", min=1, help="Maximum bytes in the namespace"),
    ] = None,
) -> None:
    """Namespaced LRU cache on a SQLite key-value store."""
    settings = _get_settings_safe()
    if settings is None:
        raise typer.Exit(1)

    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    ctx.obj = CacheTarget(
        db_path=db if db is not None else settings.CACHE_DB_PATH,
        namespace=namespace if namespace is not None else settings.CACHE_NAMESPACE,
        policy=_override_policy(settings.policy, max_entries, max_size),
    )


def _override_policy(
    policy: CachePolicy, max_entries: int | None, max_size: int | None
) -> CachePolicy:
    """Apply command-line limits over the configured policy."""
    overrides = {
        name: value
        for name, value in (("max_entries", max_entries), ("max_size", max_size))
        if value is not None
    }
    return replace(policy, **overrides)


def _run(ctx: typer.Context, operation: str, action: Callable[[Cache], Awaitable[T]]) -> T:
    """Open the backend, run one cache action, and close the backend."""
    target: CacheTarget = ctx.obj

    async def runner() -> T:
        async with SQLiteBackend(target.db_path) as backend:
            cache = Cache(backend, target.namespace, target.policy)
            with log_context(namespace=target.namespace, operation=operation):
                return await action(cache)

    try:
        return asyncio.run(runner())
    except IllegalKeyError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)
    except KVCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command("set")
def set_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Logical key")],
    value: Annotated[str, typer.Argument(help="Value to store")],
) -> None:
    """Store VALUE under KEY, evicting older entries if limits require."""

    async def action(cache: Cache) -> bool:
        await cache.set_item(key, value)
        return await cache.peek(key) is not None

    stored = _run(ctx, "set_item", action)
    if not stored:
        console.print(f"[yellow]Not cached:[/yellow] {key!r} exceeds the size limit")


@app.command("get")
def get_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Logical key")],
) -> None:
    """Print the value for KEY and mark it recently used."""
    value = _run(ctx, "get_item", lambda cache: cache.get_item(key))
    if value is None:
        error_console.print(f"[yellow]Not found:[/yellow] {key!r}")
        raise typer.Exit(1)
    typer.echo(value)


@app.command("peek")
def peek_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Logical key")],
) -> None:
    """Print the value for KEY without changing recency."""
    value = _run(ctx, "peek", lambda cache: cache.peek(key))
    if value is None:
        error_console.print(f"[yellow]Not found:[/yellow] {key!r}")
        raise typer.Exit(1)
    typer.echo(value)


@app.command("remove")
def remove_command(
    ctx: typer.Context,
    keys: Annotated[list[str], typer.Argument(help="Logical keys to remove")],
) -> None:
    """Remove one or more entries."""
    if len(keys) == 1:
        _run(ctx, "remove_item", lambda cache: cache.remove_item(keys[0]))
    else:
        _run(ctx, "multi_remove", lambda cache: cache.multi_remove(keys))


@app.command("keys")
def keys_command(
    ctx: typer.Context,
    values: Annotated[
        bool,
        typer.Option("--values", "-v", help="Include values (marks them recently used)"),
    ] = False,
) -> None:
    """List entries in the namespace."""
    target: CacheTarget = ctx.obj

    async def action(cache: Cache) -> list[tuple[str, Any]]:
        if values:
            return await cache.get_all()
        return [(k, None) for k in await cache.get_all_keys()]

    entries = _run(ctx, "get_all", action)

    table = Table(title=f"Namespace {target.namespace}", show_header=True)
    table.add_column("Key", style="cyan")
    if values:
        table.add_column("Value", style="green")
    for key, value in entries:
        if values:
            table.add_row(key, value if value is not None else "[dim]missing[/dim]")
        else:
            table.add_row(key)

    console.print(table)


@app.command("size")
def size_command(ctx: typer.Context) -> None:
    """Print content bytes plus the encoded LRU record size."""
    typer.echo(_run(ctx, "get_size", lambda cache: cache.get_size()))


@app.command("clear")
def clear_command(ctx: typer.Context) -> None:
    """Remove every entry in the namespace."""
    target: CacheTarget = ctx.obj
    _run(ctx, "clear_all", lambda cache: cache.clear_all())
    console.print(f"Cleared namespace [cyan]{target.namespace}[/cyan]")


@app.command("config")
def config_command(ctx: typer.Context) -> None:
    """Show current configuration."""
    target: CacheTarget = ctx.obj

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    effective = get_settings().display()
    # Command-line overrides win over the environment
    effective.update({
        "CACHE_DB_PATH": str(target.db_path),
        "CACHE_NAMESPACE": target.namespace,
        "CACHE_MAX_ENTRIES": target.policy.max_entries,
        "CACHE_MAX_SIZE": target.policy.max_size,
    })
    for key, value in effective.items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"kvcache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
