# src/mill_atlas/presentation/cli/commands/db.py
"""Database commands: migrations, stamping and a health check."""

from __future__ import annotations

import typer
from rich.console import Console

from mill_atlas.management.db_service import DbService

from .._state import CLISharedState
from .._utils import find_alembic_ini

app = typer.Typer(help="Database management (migrations, status).", no_args_is_help=True)
console = Console()


def _service(ctx: typer.Context) -> DbService:
    state: CLISharedState = ctx.obj
    return DbService(state.config, str(find_alembic_ini()))


@app.command("migrate")
def db_migrate(
    ctx: typer.Context,
    revision: str = typer.Argument("head", help="Target revision."),
) -> None:
    """Upgrade the schema to the given revision."""
    try:
        _service(ctx).run_migrations(revision)
    except Exception as e:
        console.print(f"[bold red]Migration failed: {e}[/bold red]")
        raise typer.Exit(code=1)


@app.command("stamp")
def db_stamp(
    ctx: typer.Context,
    revision: str = typer.Argument("head", help="Revision to record, usually 'head'."),
) -> None:
    """Record a revision in alembic_version without running migrations."""
    try:
        _service(ctx).stamp_version(revision)
    except Exception as e:
        console.print(f"[bold red]Stamp failed: {e}[/bold red]")
        raise typer.Exit(code=1)


@app.command("status")
def db_status(ctx: typer.Context) -> None:
    """Check connectivity and the PostGIS extension."""
    try:
        healthy = _service(ctx).check_status()
    except Exception as e:
        console.print(f"[bold red]Health check failed: {e}[/bold red]")
        raise typer.Exit(code=1)
    if not healthy:
        raise typer.Exit(code=1)
