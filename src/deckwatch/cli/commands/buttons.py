from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from deckwatch.cli.common import load_settings_or_exit
from deckwatch.config import plugins_dir, profiles_dir
from deckwatch.core import (
    ButtonIconResolver,
    FileUriPublisher,
    ProfileButtonResolver,
    ProfileManifestReader,
)
from deckwatch.utils.labels import button_label, format_button_key, sort_button_keys


def buttons(
    profile_uuid: str = typer.Argument(..., help="Profile UUID"),
) -> None:
    """Show the resolved buttons of a profile."""
    console = Console()
    settings = load_settings_or_exit()

    profiles = profiles_dir(settings)
    names = ProfileManifestReader(profiles, settings.monitor.unknown_profile_name)
    resolver = ProfileButtonResolver(profiles, ButtonIconResolver(plugins_dir(settings)))
    publisher = FileUriPublisher()

    resolved = resolver.resolve(profile_uuid)
    console.print(f"[bold]{names.name(profile_uuid)}[/bold] ({profile_uuid})")

    if not resolved:
        console.print("No buttons resolved.")
        return

    table = Table()
    table.add_column("Key", style="cyan")
    table.add_column("Position")
    table.add_column("Button", style="green")
    table.add_column("Icon")

    for key in sort_button_keys(list(resolved)):
        info = resolved[key]
        table.add_row(
            key,
            format_button_key(key),
            button_label(key, info),
            publisher.resolve(info.icon_path),
        )

    console.print(table)


def register(app: typer.Typer) -> None:
    app.command()(buttons)
