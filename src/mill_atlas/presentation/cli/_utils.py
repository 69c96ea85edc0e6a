# src/mill_atlas/presentation/cli/_utils.py
"""
Helpers shared by CLI commands, chiefly the Coordinator lifecycle.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from mill_atlas.application.coordinator import Coordinator
from mill_atlas.bootstrap import create_container, shutdown_container

from ._state import CLISharedState


@asynccontextmanager
async def get_coordinator(state: CLISharedState) -> AsyncGenerator[Coordinator, None]:
    """Build a container for one command and always release its engine and HTTP client."""
    container = create_container(state.config, service_name="mill-atlas-cli")
    try:
        yield container.services.coordinator()
    finally:
        await shutdown_container(container)


def find_alembic_ini() -> Path:
    """Look for alembic.ini above this package, then above the working directory."""
    start = Path(__file__).resolve().parent
    for p in [*start.parents, Path.cwd(), *Path.cwd().parents]:
        candidate = p / "alembic.ini"
        if candidate.is_file():
            return candidate
    raise FileNotFoundError("alembic.ini not found")
