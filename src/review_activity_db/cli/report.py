"""Activity report commands."""

import typer
from rich.table import Table

from review_activity_db.cli.common import (
    OutputFormat,
    OutputFormatOption,
    QuarterOption,
    YearOption,
    console,
    print_json,
    run_async_command,
)
from review_activity_db.db import get_session
from review_activity_db.reports import (
    CommentOriginReport,
    ReportService,
    TeamBreakdown,
    UserSummary,
)

app = typer.Typer(help="Reports over synced PRs and comments")


@app.command("user")
def report_user(
    username: str = typer.Argument(..., help="Tracked GitHub handle"),
    timeline: str | None = typer.Option(
        None,
        "--timeline",
        "-t",
        help="week, 2weeks, month, 3months, 6months or year (default: all)",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """PR and comment totals for one user.

    Examples:
        revactivity report user octocat --timeline 3months
    """

    async def _report() -> UserSummary:
        async with get_session() as session:
            return await ReportService(session).user_summary(username, timeline)

    summary = run_async_command(
        _report(), error_prefix="Report failed", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json({"success": True, **summary.model_dump()})
        return

    console.print(f"[bold]{summary.github_username}[/bold] ({summary.timeline})")
    console.print(f"  PRs:      {summary.total_prs}")
    console.print(f"  [green]Merged:[/green]   {summary.merged_prs}")
    console.print(f"  [blue]Open:[/blue]     {summary.open_prs}")
    console.print(f"  [dim]Closed:[/dim]   {summary.closed_prs}")
    console.print(f"  Comments: {summary.total_comments}")


@app.command("team")
def report_team(
    team_id: int = typer.Argument(..., help="Team id"),
    quarter: QuarterOption = None,
    year: YearOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Per-member PR and comment counts, grouped by repository.

    Examples:
        revactivity report team 1
        revactivity report team 1 --quarter Q2 --year 2025
    """

    async def _report() -> TeamBreakdown:
        async with get_session() as session:
            return await ReportService(session).team_breakdown(team_id, quarter, year)

    report = run_async_command(
        _report(), error_prefix="Report failed", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "success": True,
                **report.model_dump(),
                "total_prs": report.total_prs,
                "total_comments": report.total_comments,
            }
        )
        return

    period = f"{report.quarter} {report.year}" if report.quarter else "all time"
    table = Table(title=f"{report.team_name} ({period})")
    table.add_column("Member", style="cyan")
    table.add_column("PRs", justify="right")
    table.add_column("Merged", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("Repositories")
    for m in report.members:
        repos = ", ".join(f"{r.repo_name} ({r.pr_count})" for r in m.repos)
        table.add_row(
            m.github_username,
            str(m.total_prs),
            str(m.merged_prs),
            str(m.total_comments),
            repos or "-",
        )
    console.print(table)
    console.print(f"Total: {report.total_prs} PRs, {report.total_comments} comments")


@app.command("comments")
def report_comments(
    team_id: int = typer.Argument(..., help="Team id"),
    quarter: QuarterOption = None,
    year: YearOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Who commented on each member's PRs during a quarter.

    Defaults to the current quarter.

    Examples:
        revactivity report comments 1 --quarter Q1 --year 2025
    """

    async def _report() -> CommentOriginReport:
        async with get_session() as session:
            return await ReportService(session).comment_origin_analysis(team_id, quarter, year)

    report = run_async_command(
        _report(), error_prefix="Report failed", output_format=output_format
    )

    if output_format == OutputFormat.JSON:
        members = [
            {**m.model_dump(), "total_comments": m.total_comments} for m in report.members
        ]
        print_json({"success": True, **report.model_dump(), "members": members})
        return

    table = Table(title=f"{report.team_name} comment origins ({report.quarter} {report.year})")
    table.add_column("Member", style="cyan")
    table.add_column("PRs", justify="right")
    table.add_column("Own team", justify="right")
    table.add_column("Others", justify="right")
    table.add_column("Unknown", justify="right")
    table.add_column("Total", justify="right")
    for m in report.members:
        table.add_row(
            m.github_username,
            str(m.total_prs),
            str(m.from_own_team),
            str(m.from_others),
            str(m.unknown_author),
            str(m.total_comments),
        )
    console.print(table)
