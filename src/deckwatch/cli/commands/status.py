from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from deckwatch.cli.common import build_monitor, device_table, load_settings_or_exit
from deckwatch.core import RegistryUnavailableError
from deckwatch.utils.redaction import Redactor


def status(
    blob_file: Path | None = typer.Option(
        None,
        "--blob-file",
        help="Read a captured registry value instead of the live registry",
    ),
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact serials and profile ids in output",
    ),
) -> None:
    """Show connected devices and their active profiles."""
    console = Console()

    settings = load_settings_or_exit()
    monitor = build_monitor(settings, blob_file)

    try:
        snapshot = monitor.refresh()
    except RegistryUnavailableError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    if not snapshot.devices:
        console.print("No Stream Deck devices found.")
        return

    console.print(device_table(snapshot.devices, Redactor(enabled=redact)))
    console.print(f"\n[green]Found {len(snapshot.devices)} device(s)[/green]")


def register(app: typer.Typer) -> None:
    app.command()(status)
