"""Tracked user commands."""

import typer
from rich.table import Table

from review_activity_db.cli.common import (
    OutputFormat,
    OutputFormatOption,
    console,
    format_timestamp,
    print_json,
    run_async_command,
)
from review_activity_db.db import get_session
from review_activity_db.github import GitHubClient
from review_activity_db.roster import RosterService
from review_activity_db.schemas import TrackedUserRead, UserSyncStatus

app = typer.Typer(help="Manage tracked users")


@app.command("add")
def add_user(
    username: str = typer.Argument(..., help="GitHub handle to track"),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Track a GitHub user, resolving their account id.

    Running it again for a tracked user refreshes the profile fields.

    Examples:
        revactivity users add octocat
    """

    async def _add() -> tuple[TrackedUserRead, bool]:
        async with GitHubClient() as client, get_session() as session:
            user, created = await RosterService(session, client).register_user(username)
            return TrackedUserRead.from_orm(user), created

    user, created = run_async_command(
        _add(), error_prefix="Failed to add user", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json({"success": True, "created": created, "user": user.model_dump(mode="json")})
        return

    action = "Added" if created else "Updated"
    console.print(f"[green]{action}[/green] {user.github_username} (github_id={user.github_id})")


@app.command("list")
def list_users(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """List tracked users with their sync status.

    Examples:
        revactivity users list
        revactivity users list --format json
    """

    async def _list() -> list[UserSyncStatus]:
        async with get_session() as session:
            users = await RosterService(session).list_users()
            return [UserSyncStatus.from_user(u) for u in users]

    statuses = run_async_command(
        _list(), error_prefix="Failed to list users", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json([s.model_dump(mode="json") for s in statuses])
        return

    if not statuses:
        console.print("[dim]No tracked users. Add one with `revactivity users add`.[/dim]")
        return

    table = Table(title="Tracked Users")
    table.add_column("Username", style="cyan")
    table.add_column("Status")
    table.add_column("Last PR sync")
    table.add_column("Last comment sync")
    for s in statuses:
        table.add_row(
            s.github_username,
            s.status.value,
            format_timestamp(s.last_pr_sync),
            format_timestamp(s.last_comment_sync),
        )
    console.print(table)
