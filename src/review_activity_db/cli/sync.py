"""Sync commands for Review Activity DB."""

from collections.abc import Callable
from typing import Any

import typer
from rich.table import Table

from review_activity_db.cli.common import (
    NoWaitOption,
    OutputFormat,
    OutputFormatOption,
    build_github_client,
    console,
    format_timestamp,
    print_json,
    run_async_command,
)
from review_activity_db.db import get_session
from review_activity_db.github import GitHubClient
from review_activity_db.schemas import UserSyncStatus
from review_activity_db.sync import (
    CommentIngestionResult,
    CommentWorkerManager,
    SyncService,
    WorkerEventType,
    WorkerMessage,
)

app = typer.Typer(help="Sync PRs and review comments from GitHub")

_MESSAGE_STYLES = {
    WorkerEventType.WARNING: "yellow",
    WorkerEventType.SUCCESS: "green",
    WorkerEventType.ERROR: "red",
}


def _print_worker_message(message: WorkerMessage) -> None:
    style = _MESSAGE_STYLES.get(message.type)
    if style is None:
        return
    console.print(f"  [{style}]{message.username}:[/{style}] {message.message}")


def _workers(
    output_format: OutputFormat,
    client_factory: Callable[[], GitHubClient],
) -> CommentWorkerManager:
    return CommentWorkerManager(
        client_factory=client_factory,
        on_message=_print_worker_message if output_format == OutputFormat.TEXT else None,
    )


def _comment_summary(results: list[CommentIngestionResult]) -> list[dict[str, object]]:
    return [r.to_dict() for r in results]


@app.command("user")
def sync_user(
    username: str = typer.Argument(..., help="Tracked GitHub handle"),
    no_wait: NoWaitOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Sync one user's PRs, then ingest comments on them.

    PRs created since the last sync are fetched along with every PR that
    is still open. Comments are ingested in the background; the command
    waits for them unless --no-wait is given.

    Examples:
        revactivity sync user octocat
        revactivity sync user octocat --format json
        revactivity -v sync user octocat  # Debug logging
    """

    async def _sync() -> dict[str, Any]:
        client_factory = build_github_client()
        workers = _workers(output_format, client_factory)
        async with client_factory() as client, get_session() as session:
            result = await SyncService(session, client, workers).sync_user(username)
        output = result.to_dict()
        if not no_wait:
            output["comments"] = _comment_summary(await workers.wait_all())
            output["comments_processing"] = False
        return output

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing PRs for {username}...[/dim]")

    result = run_async_command(
        _sync(), error_prefix=f"Failed to sync {username}", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json(result)
        return

    console.print(f"[bold]Synced[/bold] {result['prs_synced']} PRs for {result['username']}")
    for comments in result.get("comments", []):
        _print_comment_result(comments)
    if result["comments_processing"]:
        console.print("[dim]Comment ingestion did not finish; run sync again to resume.[/dim]")


@app.command("team")
def sync_team(
    team_id: int = typer.Argument(..., help="Team id"),
    no_wait: NoWaitOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Sync every member of a team, one after another.

    A member that fails is reported and skipped; the rest still sync.

    Examples:
        revactivity sync team 1
        revactivity sync team 1 --format json
    """

    async def _sync() -> dict[str, Any]:
        client_factory = build_github_client()
        workers = _workers(output_format, client_factory)
        async with client_factory() as client, get_session() as session:
            result = await SyncService(session, client, workers).sync_team(team_id)
        output = result.to_dict()
        if not no_wait:
            output["comments"] = _comment_summary(await workers.wait_all())
        return output

    result = run_async_command(
        _sync(), error_prefix=f"Failed to sync team {team_id}", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json(result)
        return

    console.print(f"[bold]Team sync complete:[/bold] {result['team_name']}")
    console.print()
    console.print(f"  [green]Succeeded:[/green] {result['succeeded']}")
    if result["failed"]:
        console.print(f"  [red]Failed:[/red]    {result['failed']}")
    console.print(f"  PRs synced: {result['total_prs_synced']}")

    failures = [m for m in result["results"] if not m["success"]]
    if failures:
        console.print()
        console.print("[bold]Failed members:[/bold]")
        for member in failures:
            console.print(f"  {member['github_name']}: {member['error']}")

    for comments in result.get("comments", []):
        _print_comment_result(comments)


def _print_comment_result(result: dict[str, Any]) -> None:
    username = result["username"]
    if not result["success"]:
        console.print(f"  [red]{username}:[/red] comments failed ({result.get('error')})")
        return
    console.print(
        f"  {username}: {result['issue_comments']} issue / "
        f"{result['review_comments']} review comments from "
        f"{result['prs_processed']}/{result['prs_total']} PRs"
    )
    for error in result["errors"]:
        console.print(f"    [yellow]PR {error['url']}:[/yellow] {error['error']}")


def _status_table(title: str, statuses: list[UserSyncStatus]) -> Table:
    table = Table(title=title)
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
    return table


@app.command("status")
def sync_status(
    username: str = typer.Argument(..., help="Tracked GitHub handle"),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show whether a user's sync is not started, processing or completed.

    Examples:
        revactivity sync status octocat
    """

    async def _status() -> UserSyncStatus:
        async with get_session() as session:
            return await SyncService(session).sync_status(username)

    status = run_async_command(
        _status(), error_prefix="Failed to read sync status", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json({"success": True, **status.model_dump(mode="json")})
        return

    console.print(_status_table(f"Sync status: {status.github_username}", [status]))


@app.command("team-status")
def team_status(
    team_id: int = typer.Argument(..., help="Team id"),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show the sync status of every member of a team.

    Examples:
        revactivity sync team-status 1 --format json
    """

    async def _status() -> list[UserSyncStatus]:
        async with get_session() as session:
            return await SyncService(session).team_status(team_id)

    statuses = run_async_command(
        _status(), error_prefix="Failed to read team status", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "success": True,
                "team_id": team_id,
                "members": [s.model_dump(mode="json") for s in statuses],
            }
        )
        return

    console.print(_status_table(f"Team {team_id} sync status", statuses))
