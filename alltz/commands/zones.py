"""
City query commands: list, time, zone.

These commands work straight against the city database; they never touch
the config file or a running dashboard.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import typer
from rich import box
from rich.table import Table

from ..database.cities import CityDatabase, CityRecord
from ..exceptions import DataError, NotFoundError
from ..models.zones import format_offset
from ..utils.output import console

TIME_FORMAT_24 = "%H:%M:%S %a %d %b %Y"
TIME_FORMAT_12 = "%I:%M:%S %p %a %d %b %Y"


def load_database() -> CityDatabase:
    """Load the bundled city database or exit with status 1."""
    try:
        return CityDatabase.load()
    except DataError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e


def resolve_city(database: CityDatabase, name: str) -> CityRecord:
    city = database.find(name)
    if city is None:
        raise NotFoundError(name)
    return city


def _lookup(database: CityDatabase, name: str) -> CityRecord:
    try:
        return resolve_city(database, name)
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


def dst_status(city: CityRecord, now: datetime) -> str:
    """Describe whether the city's zone observes DST and whether it is in effect."""
    tz = city.tz
    local = now.astimezone(tz)
    if local.dst():
        return "in effect"
    january = datetime(local.year, 1, 1, 12, tzinfo=tz).utcoffset()
    july = datetime(local.year, 7, 1, 12, tzinfo=tz).utcoffset()
    if january != july:
        return "observed, not in effect"
    return "not observed"


def list_cities() -> None:
    """List every known city."""
    database = load_database()

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("City", style="bold")
    table.add_column("Country")
    table.add_column("Code", style="cyan")
    table.add_column("Timezone", style="dim")
    table.add_column("Coordinates", justify="right")

    for city in sorted(database, key=lambda c: (c.name, c.country)):
        table.add_row(city.name, city.country, city.code, city.timezone, city.coordinates_label())

    console.print(table)
    console.print(f"[dim]{len(database)} cities[/dim]")


def show_time(
    city_name: str = typer.Argument(..., help="City name, e.g. Tokyo or \"London, Canada\""),
    twelve_hour: bool = typer.Option(False, "--twelve-hour", help="Use 12-hour time"),
) -> None:
    """Show the current time in a city next to your local time."""
    database = load_database()
    city = _lookup(database, city_name)
    now = datetime.now(timezone.utc)
    fmt = TIME_FORMAT_12 if twelve_hour else TIME_FORMAT_24

    local = now.astimezone(city.tz)
    mine = now.astimezone()
    console.print(f"[bold]{city.display}[/bold]")
    console.print(f"  Time there:  {local.strftime(fmt)} ({format_offset(local.utcoffset() or timedelta(0))})")
    console.print(f"  Your time:   {mine.strftime(fmt)}")


def zone_info(
    city_name: str = typer.Argument(..., help="City name, e.g. Tokyo or \"London, Canada\""),
) -> None:
    """Show detailed timezone information for a city."""
    database = load_database()
    city = _lookup(database, city_name)
    now = datetime.now(timezone.utc)
    local = now.astimezone(city.tz)

    table = Table(box=None, show_header=False, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("City", city.display)
    table.add_row("Code", city.code)
    table.add_row("Timezone", city.timezone)
    table.add_row("UTC offset", format_offset(local.utcoffset() or timedelta(0)))
    table.add_row("Coordinates", city.coordinates_label())
    table.add_row("Current time", local.strftime(TIME_FORMAT_24))
    table.add_row("DST", dst_status(city, now))
    if city.aliases:
        table.add_row("Also known as", ", ".join(city.aliases))
    namesakes = [other.display for other in database.same_name(city) if other is not city]
    if namesakes:
        table.add_row("Not to be confused with", "; ".join(namesakes))

    console.print(table)


def find_optional_city(database: CityDatabase, name: Optional[str]) -> Optional[CityRecord]:
    """Resolve ``--timezone``; unknown names print a warning and yield None."""
    if not name:
        return None
    city = database.find(name)
    if city is None:
        console.print(f"[yellow]Warning: city '{name}' not found; starting without it[/yellow]")
    return city
