from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from alamira.cli.common import build_database, load_settings_or_exit
from alamira.config import DatabaseConfig, Settings, resolve_config_path, write_settings


def register(app: typer.Typer) -> None:
    @app.command()
    def init(
        data_dir: Annotated[
            Path | None,
            typer.Option("--data-dir", "--path", help="Custom data directory"),
        ] = None,
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Overwrite existing config and data"),
        ] = False,
    ) -> None:
        """Initialize Alamira configuration and data directory."""
        console = Console()

        config_path, config_exists = resolve_config_path(allow_missing=True)
        if config_exists and not force:
            console.print(f"[dim]Config exists:[/dim] {config_path}")
            settings = load_settings_or_exit()
        else:
            settings = (
                Settings(database=DatabaseConfig(path=str(data_dir)))
                if data_dir
                else Settings()
            )
            write_settings(settings, config_path)
            action = "Overwrote" if config_exists else "Created"
            console.print(f"[green]✓[/green] {action} config: {config_path}")

        db = build_database(settings, data_dir=data_dir)
        if db.init(force=force):
            console.print(f"[green]✓[/green] Initialized data dir: {db.path}")
        else:
            console.print(f"[dim]Data dir exists:[/dim] {db.path}")
