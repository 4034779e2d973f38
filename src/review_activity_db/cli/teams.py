"""Team commands."""

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
from review_activity_db.roster import RosterService
from review_activity_db.schemas import TeamRead

app = typer.Typer(help="Manage teams of tracked users")


@app.command("create")
def create_team(
    name: str = typer.Argument(..., help="Unique team name"),
    description: str | None = typer.Option(None, "--description", "-d", help="Team description"),
    members: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--member",
        "-m",
        help="Tracked GitHub handle to add (repeatable)",
    ),
    assigned_by: str | None = typer.Option(None, "--assigned-by", help="Who made the assignment"),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Create a team, optionally with initial members.

    Members must already be tracked (see `revactivity users add`).

    Examples:
        revactivity teams create platform -m octocat -m hubot
    """

    async def _create() -> TeamRead:
        async with get_session() as session:
            team = await RosterService(session).create_team(
                name, description, members or [], assigned_by
            )
            return TeamRead.from_orm(team)

    team = run_async_command(
        _create(), error_prefix="Failed to create team", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json({"success": True, "team": team.model_dump(mode="json")})
        return

    console.print(f"[green]Created team[/green] {team.name} (id={team.id})")


@app.command("add-member")
def add_member(
    team_id: int = typer.Argument(..., help="Team id"),
    usernames: list[str] = typer.Argument(..., help="Tracked GitHub handles"),  # noqa: B008
    assigned_by: str | None = typer.Option(None, "--assigned-by", help="Who made the assignment"),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Add tracked users to a team. Existing members are left as they are.

    Examples:
        revactivity teams add-member 1 octocat hubot
    """

    async def _add() -> int:
        async with get_session() as session:
            return await RosterService(session).add_members(team_id, usernames, assigned_by)

    added = run_async_command(
        _add(), error_prefix="Failed to add members", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json({"success": True, "team_id": team_id, "added": added})
        return

    console.print(f"Added {added} new member(s) to team {team_id}")


@app.command("list")
def list_teams(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """List teams.

    Examples:
        revactivity teams list
    """

    async def _list() -> list[TeamRead]:
        async with get_session() as session:
            return TeamRead.from_orm_list(await RosterService(session).list_teams())

    teams = run_async_command(
        _list(), error_prefix="Failed to list teams", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json([t.model_dump(mode="json") for t in teams])
        return

    if not teams:
        console.print("[dim]No teams. Create one with `revactivity teams create`.[/dim]")
        return

    table = Table(title="Teams")
    table.add_column("Id", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Description", max_width=50)
    table.add_column("Last sync")
    for t in teams:
        table.add_row(str(t.id), t.name, t.description or "", format_timestamp(t.last_sync))
    console.print(table)
