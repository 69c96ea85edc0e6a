# src/mill_atlas/presentation/cli/commands/data.py
"""Sample data, water line maintenance and slug preview."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from mill_atlas.domain.slug import generate_slug

from .._state import CLISharedState
from .._utils import get_coordinator

water_lines_app = typer.Typer(help="Water line maintenance.", no_args_is_help=True)
console = Console()


def seed(ctx: typer.Context) -> None:
    """Insert the sample mill, levada and poça (no-op when present)."""
    state: CLISharedState = ctx.obj

    async def _run():
        async with get_coordinator(state) as coordinator:
            return await coordinator.seed()

    try:
        result = asyncio.run(_run())
    except Exception as e:
        console.print(f"[bold red]Seeding failed: {e}[/bold red]")
        raise typer.Exit(code=1)
    if result.created:
        console.print(f"[green]Sample data inserted:[/green] {', '.join(result.slugs)}")
    else:
        console.print("[yellow]Sample data already present.[/yellow]")


def slug(text: str = typer.Argument(..., help="Title to turn into a slug.")) -> None:
    """Print the slug a title would get (before uniqueness suffixes)."""
    console.print(generate_slug(text))


@water_lines_app.command("reparent")
def reparent(ctx: typer.Context) -> None:
    """Create a published construction for every water line without one."""
    state: CLISharedState = ctx.obj

    async def _run():
        async with get_coordinator(state) as coordinator:
            return await coordinator.reparent_water_lines()

    try:
        report = asyncio.run(_run())
    except Exception as e:
        console.print(f"[bold red]Re-parenting failed: {e}[/bold red]")
        raise typer.Exit(code=1)
    if not report.reparented and not report.failed:
        console.print("[green]No orphan water lines.[/green]")
        return
    if report.reparented:
        table = Table(title="Re-parented water lines")
        table.add_column("Water line", style="cyan")
        table.add_column("Construction")
        for r in report.reparented:
            table.add_row(r.water_line_slug, r.construction_slug)
        console.print(table)
    if report.failed:
        console.print(
            f"[bold red]{len(report.failed)} water line(s) could not be re-parented: "
            f"{', '.join(report.failed)}[/bold red]"
        )
        raise typer.Exit(code=1)
