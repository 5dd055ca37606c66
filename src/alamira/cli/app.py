from __future__ import annotations

from typing import Annotated

import typer

from alamira.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands import devices as devices_cmd
from .commands.init import register as register_init
from .commands.onboard import register as register_onboard
from .commands.simulator import register as register_simulator

app = typer.Typer(
    help="Alamira - onboard displays onto WiFi and manage paired devices",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(devices_cmd.app, name="devices")

register_init(app)
register_onboard(app)
register_simulator(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
) -> None:
    """Alamira CLI."""
    setup_logging(log_level)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"alamira version {get_version('alamira')}")
        raise typer.Exit()
