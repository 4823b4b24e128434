"""
Hydrated CLI entry point.

Commands:
    hydrated path    — Show where the box lives
    hydrated keys    — List stored keys
    hydrated get     — Print a stored value
    hydrated set     — Store a JSON value
    hydrated delete  — Remove a key
    hydrated clear   — Delete the whole box from disk
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hydrated.core.config import HydratedConfig
from hydrated.core.errors import HydratedError
from hydrated.core.logging import level_from_name, setup_logging
from hydrated.store.hydrated import HydratedStorage
from hydrated.store.manager import StorageManager

app = typer.Typer(
    name="hydrated",
    help="Hydrated — inspect and edit persisted state snapshots.",
    add_completion=False,
)

console = Console()

T = TypeVar("T")

DirOption = typer.Option(None, "--dir", "-d", help="Storage directory")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug output")


def _run(
    directory: Path | None,
    verbose: bool,
    action: Callable[[HydratedStorage], Awaitable[T]],
) -> T:
    """Build storage, run action against it and close the box afterwards."""
    try:
        config = HydratedConfig.load()
    except HydratedError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    level = logging.DEBUG if verbose else level_from_name(config.logging.level)
    log_dir = Path(config.logging.log_dir) if config.logging.log_dir else None
    setup_logging(log_dir=log_dir, console_level=level)

    async def runner() -> T:
        async with StorageManager(config.storage) as manager:
            storage = await manager.build(directory)
            result = await action(storage)
            await storage.flush()
            return result

    try:
        return asyncio.run(runner())
    except HydratedError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)


@app.command()
def path(
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the location of the storage box."""

    async def action(storage: HydratedStorage) -> Path | None:
        return storage.box.path

    box_path = _run(directory, verbose, action)
    console.print(
        str(box_path) if box_path else "[dim]in-memory box[/dim]", soft_wrap=True
    )


@app.command()
def keys(
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
) -> None:
    """List every stored key."""

    async def action(storage: HydratedStorage) -> list[str]:
        return storage.keys()

    stored = _run(directory, verbose, action)
    if not stored:
        console.print("[dim]No stored keys.[/dim]")
        return

    table = Table(title="Stored keys")
    table.add_column("Key", style="cyan")
    for key in stored:
        table.add_row(escape(key))
    console.print(table)


@app.command()
def get(
    key: str = typer.Argument(..., help="Key to read"),
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Print the value stored under KEY as JSON."""

    async def action(storage: HydratedStorage) -> Any:
        return storage.read(key)

    value = _run(directory, verbose, action)
    if value is None:
        console.print(f"[yellow]No value stored under '{escape(key)}'[/yellow]")
        raise typer.Exit(1)
    console.print_json(json.dumps(value))


@app.command("set")
def set_(
    key: str = typer.Argument(..., help="Key to write"),
    value: str = typer.Argument(..., help="JSON value"),
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Store a JSON VALUE under KEY."""
    try:
        payload = json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    async def action(storage: HydratedStorage) -> None:
        await storage.write(key, payload)

    _run(directory, verbose, action)
    console.print(f"[green]✓[/green] Stored '{escape(key)}'")


@app.command()
def delete(
    key: str = typer.Argument(..., help="Key to remove"),
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove KEY from the box."""

    async def action(storage: HydratedStorage) -> None:
        await storage.delete(key)

    _run(directory, verbose, action)
    console.print(f"[green]✓[/green] Deleted '{escape(key)}'")


@app.command()
def clear(
    directory: Path = DirOption,
    verbose: bool = VerboseOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete the storage box from disk."""
    if not yes:
        typer.confirm("Delete the storage box and everything in it?", abort=True)

    async def action(storage: HydratedStorage) -> None:
        await storage.clear()

    _run(directory, verbose, action)
    console.print("[green]✓[/green] Storage cleared")


@app.command()
def version() -> None:
    """Show the Hydrated version."""
    from hydrated import __version__

    console.print(f"hydrated {__version__}")


if __name__ == "__main__":
    app()
