"""Config command: show, locate or initialise the preferences file."""

from __future__ import annotations

import typer

from ..config.store import AppConfig, ConfigStore
from ..exceptions import PersistError
from ..utils.output import console, print_json


def config_command(
    init: bool = typer.Option(False, "--init", help="Write the default config file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file with --init"),
    path_only: bool = typer.Option(False, "--path", help="Only print the config file path"),
) -> None:
    """Print the config file path and its effective contents."""
    store = ConfigStore()

    if path_only:
        print(store.path)
        return

    if init:
        if store.path.exists() and not force:
            console.print(f"[yellow]{store.path} already exists; use --force to overwrite[/yellow]")
            raise typer.Exit(1)
        try:
            store.save(AppConfig.default())
        except PersistError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1) from e
        console.print(f"[green]Wrote default config to {store.path}[/green]")
        return

    result = store.load()
    if result.warning:
        console.print(f"[yellow]Warning: {result.warning}[/yellow]")
    console.print(f"[dim]# {store.path}[/dim]")
    print_json(result.config.to_dict())
