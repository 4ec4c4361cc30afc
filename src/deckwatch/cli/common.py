from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import typer
from rich.table import Table

from deckwatch.config import Settings, get_settings, resolve_config_path
from deckwatch.core import DeckMonitor, build_source
from deckwatch.core.monitor import Subscriber
from deckwatch.models import DeviceView
from deckwatch.utils.redaction import Redactor


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_monitor(
    settings: Settings,
    blob_file: Path | None = None,
    subscriber: Subscriber | None = None,
) -> DeckMonitor:
    return DeckMonitor(settings, build_source(settings, blob_file), subscriber)


def device_table(devices: Iterable[DeviceView], redactor: Redactor) -> Table:
    table = Table()
    table.add_column("Device Name", style="green")
    table.add_column("Serial", style="cyan")
    table.add_column("Profile Name", style="yellow")
    table.add_column("Profile UUID")
    table.add_column("Buttons", justify="right")

    for device in devices:
        table.add_row(
            device.device_name,
            redactor.redact_serial(device.serial),
            device.profile_name,
            redactor.redact_uuid(device.profile_uuid),
            str(len(device.buttons)),
        )
    return table
