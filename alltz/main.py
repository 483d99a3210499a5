#!/usr/bin/env python3
"""
Main CLI entry point for alltz
"""

import logging
from typing import Optional

import typer

from alltz import __version__
from alltz.commands.config import config_command
from alltz.commands.zones import find_optional_city, list_cities, load_database, show_time, zone_info
from alltz.config.preferences import ColorTheme
from alltz.config.store import ConfigStore
from alltz.utils.logging import get_logger, setup_tui_logging

app = typer.Typer(
    help="alltz - every timezone on one scrubbable timeline",
    invoke_without_command=True,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)


def _parse_theme(value: Optional[str]) -> Optional[ColorTheme]:
    if value is None:
        return None
    theme = ColorTheme.parse(value)
    if theme is None:
        choices = ", ".join(member.value.lower() for member in ColorTheme)
        raise typer.BadParameter(f"Unknown theme '{value}'. Choose from: {choices}")
    return theme


def launch_dashboard(
    timezone_name: Optional[str] = None,
    twelve_hour: bool = False,
    theme: Optional[ColorTheme] = None,
) -> None:
    """Load everything the dashboard needs, then hand the terminal to Textual."""
    # Imported lazily so list/time/zone never pay for Textual start-up
    from alltz.ui.dashboard import AlltzApp, apply_startup_options
    from alltz.ui.navigation import Navigator

    database = load_database()
    store = ConfigStore()
    result = store.load()

    navigator = Navigator.from_config(result.config, database, store=store)
    if result.warning:
        navigator.warnings.append(result.warning)

    city = find_optional_city(database, timezone_name)
    apply_startup_options(navigator, city=city, twelve_hour=twelve_hour, theme=theme)

    log_file = setup_tui_logging()
    logger.info("Starting dashboard with %d zones (log: %s)", len(navigator.registry), log_file)
    AlltzApp(navigator).run()


@app.callback()
def main(
    ctx: typer.Context,
    timezone_name: Optional[str] = typer.Option(
        None, "--timezone", "-t", help="Select this city on start, adding it if needed"
    ),
    twelve_hour: bool = typer.Option(False, "--twelve-hour", help="Start in 12-hour mode"),
    theme: Optional[str] = typer.Option(
        None,
        "--theme",
        help="Color theme (default, ocean, forest, sunset, cyberpunk, monochrome)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    alltz - every timezone on one scrubbable timeline

    Run without a command to open the dashboard.

    [bold]Examples:[/bold]

    Open the dashboard on Tokyo in 12-hour mode:
        [cyan]alltz -t Tokyo --twelve-hour[/cyan]

    What time is it in Sydney?
        [cyan]alltz time Sydney[/cyan]

    Which London?
        [cyan]alltz zone "London, Canada"[/cyan]
    """
    if verbose:
        get_logger("alltz", logging.DEBUG)

    color_theme = _parse_theme(theme)
    if ctx.invoked_subcommand is None:
        launch_dashboard(timezone_name, twelve_hour, color_theme)


def version():
    """Show alltz version"""
    typer.echo(f"alltz version {__version__}")


app.command("list")(list_cities)
app.command("ls", hidden=True)(list_cities)
app.command("time")(show_time)
app.command("show", hidden=True)(show_time)
app.command("zone")(zone_info)
app.command("info", hidden=True)(zone_info)
app.command("config")(config_command)
app.command("version")(version)


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
