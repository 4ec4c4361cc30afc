from __future__ import annotations

from typing import Annotated

import typer

from deckwatch.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands.buttons import register as register_buttons
from .commands.evidence import register as register_evidence
from .commands.parse import register as register_parse
from .commands.status import register as register_status
from .commands.watch import register as register_watch

app = typer.Typer(
    help="deckwatch - follow Stream Deck devices, profiles and buttons",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config", help="Show or create configuration")

register_status(app)
register_watch(app)
register_buttons(app)
register_parse(app)
register_evidence(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: $LOGLEVEL or WARNING)",
        ),
    ] = None,
) -> None:
    """deckwatch CLI."""
    setup_logging(log_level)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"deckwatch version {get_version('deckwatch')}")
        raise typer.Exit()


if __name__ == "__main__":
    app()
