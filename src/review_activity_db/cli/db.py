"""Database maintenance commands."""

import typer

from review_activity_db.cli.common import console, run_async_command
from review_activity_db.config import get_settings
from review_activity_db.db import create_tables

app = typer.Typer(help="Database commands")


@app.command("init")
def init_db() -> None:
    """Create all tables in the configured database.

    Intended for local SQLite use; deployed databases go through Alembic.

    Examples:
        revactivity db init
    """
    run_async_command(create_tables(), error_prefix="Database init failed")
    console.print(f"[green]Tables created[/green] in {get_settings().database_url}")
