from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from deckwatch.cli.common import load_settings_or_exit
from deckwatch.config import plugins_dir
from deckwatch.core import LogScanner
from deckwatch.utils.redaction import Redactor


def evidence(
    redact: bool = typer.Option(False, "--redact", help="Redact device ids"),
) -> None:
    """Show device names and profiles recovered from plugin logs."""
    console = Console()
    settings = load_settings_or_exit()
    redactor = Redactor(enabled=redact)

    scanner = LogScanner(plugins_dir(settings), settings.paths.helper_plugin)
    found = scanner.scan()

    if not found.custom_names and not found.profile_names:
        console.print(f"No device evidence found under {scanner.plugins_dir}")
        return

    table = Table()
    table.add_column("Device ID", style="cyan")
    table.add_column("Custom Name", style="green")
    table.add_column("Profiles Seen")

    for device_id in sorted(set(found.custom_names) | set(found.profile_names)):
        table.add_row(
            redactor.redact_device_id(device_id),
            found.custom_names.get(device_id, ""),
            ", ".join(sorted(found.profile_names.get(device_id, set()))),
        )

    console.print(table)


def register(app: typer.Typer) -> None:
    app.command()(evidence)
