"""Review-feedback scoring commands."""

import typer

from review_activity_db.cli.common import (
    OutputFormat,
    OutputFormatOption,
    console,
    print_json,
    run_async_command,
)
from review_activity_db.db import get_session
from review_activity_db.scoring import ChatCompletionsOracle, PRAnalysis, PRScoringService

app = typer.Typer(help="Score review feedback on synced PRs")


@app.command("pr")
def analyze_pr(
    pr_github_id: int = typer.Argument(..., help="Remote id of a synced PR"),
    instructions: str | None = typer.Option(
        None,
        "--prompt",
        "-p",
        help="Free-form instructions; prints the reply and stores nothing",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Score the comments on one PR and store the category scores.

    Examples:
        revactivity analyze pr 2001234567
        revactivity analyze pr 2001234567 --prompt "Summarize the main concerns"
    """

    async def _analyze() -> PRAnalysis | str:
        async with get_session() as session:
            service = PRScoringService(session, ChatCompletionsOracle())
            if instructions:
                return await service.analyze_custom(pr_github_id, instructions)
            return await service.analyze(pr_github_id)

    result = run_async_command(
        _analyze(), error_prefix="Analysis failed", output_format=output_format
    )

    if isinstance(result, str):
        if output_format == OutputFormat.JSON:
            print_json({"success": True, "pr_github_id": pr_github_id, "response": result})
        else:
            console.print(result)
        return

    if output_format == OutputFormat.JSON:
        print_json({"success": True, "pr_github_id": pr_github_id, **result.model_dump()})
        return

    console.print(f"[bold]PR {pr_github_id}[/bold] overall score: {result.overall_score}")
    for category, score in result.scores.items():
        console.print(f"  {category}: {score:g}")
    if result.parse_error:
        console.print(f"[yellow]Warning:[/yellow] {result.parse_error}")
