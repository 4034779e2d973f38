"""Main CLI application for Review Activity DB."""

from pathlib import Path
from typing import Annotated

import typer

from review_activity_db import __version__
from review_activity_db.cli import analyze as analyze_cmd
from review_activity_db.cli import db as db_cmd
from review_activity_db.cli import report as report_cmd
from review_activity_db.cli import sync as sync_cmd
from review_activity_db.cli import teams as teams_cmd
from review_activity_db.cli import users as users_cmd
from review_activity_db.cli.common import console
from review_activity_db.config import get_settings
from review_activity_db.logging import setup_logging

app = typer.Typer(
    name="revactivity",
    help="PR and review comment activity for tracked engineers and teams.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"revactivity version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Review Activity DB - Sync and report PR review activity."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


# Register subcommands
app.add_typer(users_cmd.app, name="users")
app.add_typer(teams_cmd.app, name="teams")
app.add_typer(sync_cmd.app, name="sync")
app.add_typer(analyze_cmd.app, name="analyze")
app.add_typer(report_cmd.app, name="report")
app.add_typer(db_cmd.app, name="db")


if __name__ == "__main__":
    app()
