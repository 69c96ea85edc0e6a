# src/mill_atlas/management/db_service.py
"""
Database operations for the management plane: health check, alembic
upgrade and stamp. Alembic runs on a synchronous psycopg engine.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import create_engine, text
from sqlalchemy.engine.url import make_url

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.util import CommandError

from mill_atlas.config import MillAtlasConfig
from mill_atlas.exceptions import DatabaseError

from .config_utils import mask_db_url, to_sync_url

console = Console()


class DbService:
    def __init__(self, config: MillAtlasConfig, alembic_ini_path: str):
        self.config = config
        self.alembic_ini_path = alembic_ini_path
        self.app_db_name = make_url(config.database.url).database
        maint = config.maintenance_database_url or config.database.url
        self.sync_url = to_sync_url(maint)

    def _get_alembic_cfg(self) -> AlembicConfig:
        cfg = AlembicConfig(self.alembic_ini_path)
        real_url = self.sync_url.render_as_string(hide_password=False)
        cfg.set_main_option("sqlalchemy.url", real_url.replace("%", "%%"))
        return cfg

    def check_status(self) -> bool:
        """Connectivity plus PostGIS version; returns False on any failure."""
        console.print(Panel("Database health check", border_style="cyan"))
        table = Table(show_header=False, box=None)
        table.add_column(style="cyan", width=22)
        table.add_column()
        table.add_row("Database", mask_db_url(self.sync_url))
        ok = True
        engine = create_engine(self.sync_url)
        try:
            with engine.connect() as conn:
                table.add_row("Connection", "[green]OK[/green]")
                try:
                    version = conn.execute(text("SELECT postgis_version()")).scalar()
                    table.add_row("PostGIS", f"[green]{version}[/green]")
                except Exception as e:
                    table.add_row("PostGIS", f"[red]missing ({e.__class__.__name__})[/red]")
                    ok = False
        except Exception as e:
            table.add_row("Connection", f"[red]failed: {e}[/red]")
            ok = False
        finally:
            engine.dispose()
        console.print(table)
        return ok

    def run_migrations(self, revision: str = "head") -> None:
        console.print(Panel(f"Migrating {self.app_db_name} to {revision}", border_style="cyan"))
        try:
            command.upgrade(self._get_alembic_cfg(), revision)
        except CommandError as e:
            raise DatabaseError(f"Migration failed: {e}") from e
        console.print("[bold green]Migrations applied.[/bold green]")

    def stamp_version(self, revision: str = "head") -> None:
        console.print(Panel(f"Stamping database as {revision}", border_style="yellow"))
        try:
            command.stamp(self._get_alembic_cfg(), revision)
        except CommandError as e:
            raise DatabaseError(f"Stamp failed: {e}") from e
        console.print("[bold green]Stamped.[/bold green]")
