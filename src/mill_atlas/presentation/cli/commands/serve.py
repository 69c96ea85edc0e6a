# src/mill_atlas/presentation/cli/commands/serve.py
from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from .._state import CLISharedState


def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from config)."),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default from config)."),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    state: CLISharedState = ctx.obj
    uvicorn.run(
        "mill_atlas.api.app:create_app",
        factory=True,
        host=host or state.config.api.host,
        port=port or state.config.api.port,
        reload=reload,
        log_config=None,
    )
