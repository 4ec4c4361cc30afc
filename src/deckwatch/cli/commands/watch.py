from __future__ import annotations

import queue
from pathlib import Path

import typer
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.text import Text

from deckwatch.cli.common import build_monitor, device_table, load_settings_or_exit
from deckwatch.models import Snapshot
from deckwatch.utils.redaction import Redactor


def render_snapshot(snapshot: Snapshot | None, redactor: Redactor) -> RenderableType:
    if snapshot is None:
        return Text("Waiting for the first scan...", style="dim")

    header = Text(f"Last update: {snapshot.timestamp.astimezone():%H:%M:%S}")
    if snapshot.has_error:
        return Group(header, Text(f"Error: {snapshot.error_message}", style="red"))
    if not snapshot.devices:
        return Group(header, Text("No Stream Deck devices found."))
    return Group(header, device_table(snapshot.devices, redactor))


def watch(
    blob_file: Path | None = typer.Option(
        None,
        "--blob-file",
        help="Watch a captured registry value file instead of the live registry",
    ),
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact serials and profile ids in output",
    ),
) -> None:
    """Follow active profiles live until interrupted."""
    console = Console()
    settings = load_settings_or_exit()
    redactor = Redactor(enabled=redact)

    updates: queue.Queue[Snapshot] = queue.Queue()
    monitor = build_monitor(settings, blob_file, subscriber=updates.put)

    console.print("Watching Stream Deck profiles. Press Ctrl+C to stop.\n")
    last: Snapshot | None = None
    monitor.start()
    try:
        with Live(render_snapshot(None, redactor), console=console, auto_refresh=False) as live:
            while monitor.is_running or not updates.empty():
                try:
                    last = updates.get(timeout=0.5)
                except queue.Empty:
                    continue
                live.update(render_snapshot(last, redactor), refresh=True)
                if last.has_error:
                    break
    except KeyboardInterrupt:
        console.print("\n[green]Stopped.[/green]")
    finally:
        monitor.stop()

    if last is not None and last.has_error:
        raise typer.Exit(1)


def register(app: typer.Typer) -> None:
    app.command()(watch)
