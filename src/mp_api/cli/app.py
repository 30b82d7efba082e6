"""Typer CLI root application with serve command."""

import typer

from mp_api.core.config import get_settings
from mp_api.core.logging import setup_logging

app = typer.Typer(name="mp-api", help="Canadian MP lookup and statistics CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "mp_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from mp_api.cli.cache_cmd import cache_app
    from mp_api.cli.categorize_cmd import categorize_app
    from mp_api.cli.db_cmd import db_app
    from mp_api.cli.mappings_cmd import mappings_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(cache_app, name="cache", help="Cache maintenance commands")
    app.add_typer(mappings_app, name="mappings", help="Manual postal code mapping commands")
    app.add_typer(categorize_app, name="categorize", help="Bill categorization commands")


_register_subcommands()
