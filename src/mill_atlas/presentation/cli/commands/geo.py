# src/mill_atlas/presentation/cli/commands/geo.py
from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .._state import CLISharedState
from .._utils import get_coordinator

app = typer.Typer(help="Spatial queries.", no_args_is_help=True)
console = Console()


@app.command("nearest")
def nearest(
    ctx: typer.Context,
    lat: float = typer.Option(..., "--lat", help="Latitude (WGS84)."),
    lng: float = typer.Option(..., "--lng", help="Longitude (WGS84)."),
    limit: int = typer.Option(5, "--limit", min=1, help="Number of results."),
    locale: Optional[str] = typer.Option(None, "--locale", help="Title locale."),
) -> None:
    """List the published constructions closest to a point."""
    state: CLISharedState = ctx.obj

    async def _run():
        async with get_coordinator(state) as coordinator:
            return await coordinator.nearest(lat, lng, locale, limit)

    try:
        rows = asyncio.run(_run())
    except Exception as e:
        console.print(f"[bold red]Lookup failed: {e}[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Nearest to {lat}, {lng}")
    table.add_column("Slug", style="cyan")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Distance (m)", justify="right")
    for row in rows:
        table.add_row(row.slug, row.type_category, row.title or "", f"{row.distance_m:.0f}")
    console.print(table)
