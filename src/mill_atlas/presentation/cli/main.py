# src/mill_atlas/presentation/cli/main.py
"""`mill-atlas` command line: API server, database and maintenance tasks."""

import typer
from rich.console import Console
from rich.traceback import install as install_rich_tracebacks

from mill_atlas.bootstrap import create_app_config
from mill_atlas.observability.logging_config import setup_logging_from_config

from ._state import CLISharedState
from .commands import data, db, geo, serve

install_rich_tracebacks(show_locals=False, word_wrap=True)

app = typer.Typer(
    name="mill-atlas",
    help="Mill Atlas management tool.",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(db.app, name="db")
app.add_typer(geo.app, name="geo")
app.add_typer(data.water_lines_app, name="water-lines")
app.command("seed")(data.seed)
app.command("slug")(data.slug)
app.command("serve")(serve.serve)

console = Console()


@app.callback()
def main(ctx: typer.Context) -> None:
    """Load configuration once and hand it to every sub-command."""
    try:
        config = create_app_config()
        setup_logging_from_config(config, service="mill-atlas-cli")
    except Exception as e:
        console.print(f"[bold red]Startup failed: could not load configuration: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    ctx.obj = CLISharedState(config)


if __name__ == "__main__":
    app()
