from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from deckwatch.cli.common import load_settings_or_exit
from deckwatch.core import parse_blob


def parse(
    blob_file: Path = typer.Argument(..., help="File holding a raw registry value"),
) -> None:
    """Decode the device records of a captured registry value."""
    console = Console()
    settings = load_settings_or_exit()

    try:
        raw = blob_file.read_bytes()
    except OSError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    records = parse_blob(raw, settings.monitor.placeholder_name)
    if not records:
        console.print("No device records found.")
        return

    table = Table()
    table.add_column("Serial", style="cyan")
    table.add_column("Device Name", style="green")
    table.add_column("Profile UUID")
    table.add_column("Full ID")

    for record in records:
        table.add_row(
            record.serial, record.device_name, record.profile_uuid, record.full_id
        )

    console.print(table)
    console.print(f"\n[green]{len(records)} record(s)[/green]")


def register(app: typer.Typer) -> None:
    app.command()(parse)
