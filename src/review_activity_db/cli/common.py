"""Common CLI option factories and helpers.

This module centralizes reusable CLI options and provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `fail`: Error reporting in the selected output format
- `build_github_client`: Paced GitHub client sharing one rate limit monitor
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Coroutine
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, NoReturn, TypeVar

import typer
from rich.console import Console

from review_activity_db.config import get_settings
from review_activity_db.db import dispose_engine
from review_activity_db.exceptions import error_payload
from review_activity_db.github import GitHubClient, RateLimitMonitor, RequestPacer

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def format_timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


def fail(
    message: str,
    error: BaseException,
    output_format: OutputFormat = OutputFormat.TEXT,
) -> NoReturn:
    """Report a failed command and exit with code 1.

    JSON output uses the standard failure body; the raw error is omitted
    in production.
    """
    if output_format == OutputFormat.JSON:
        print_json(error_payload(message, error, get_settings().environment))
    else:
        console.print(f"[red]{message}:[/red] {error}")
    raise typer.Exit(1)


async def _with_engine_cleanup(coro: Coroutine[object, object, T]) -> T:
    try:
        return await coro
    finally:
        await dispose_engine()


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
    output_format: OutputFormat = OutputFormat.TEXT,
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1. The shared
    database engine is disposed before the loop closes.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")
        output_format: Format used to report a failure

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error

    Example:
        async def _status() -> UserSyncStatus:
            async with get_session() as session:
                ...

        status = run_async_command(_status(), error_prefix="Status failed")
    """
    try:
        return asyncio.run(_with_engine_cleanup(coro))
    except typer.Exit:
        # Re-raise deliberate exits (e.g., from validation helpers)
        raise
    except Exception as e:
        fail(error_prefix, e, output_format)


def build_github_client() -> Callable[[], GitHubClient]:
    """Factory for GitHub clients that pace against one shared quota view."""
    settings = get_settings()
    monitor = RateLimitMonitor(settings.rate_limit)
    pacer = RequestPacer(monitor, settings.pacing)

    def factory() -> GitHubClient:
        return GitHubClient(rate_monitor=monitor, pacer=pacer)

    return factory


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

NoWaitOption = Annotated[
    bool,
    typer.Option(
        "--no-wait",
        help="Return once PRs are stored; unfinished comment ingestion is "
        "cancelled on exit and resumes with the next sync",
    ),
]
"""Skip waiting for background comment ingestion.

Usage:
    def sync_user(username: str, no_wait: NoWaitOption = False):
"""

QuarterOption = Annotated[
    str | None,
    typer.Option(
        "--quarter",
        help="Calendar quarter (Q1-Q4)",
    ),
]

YearOption = Annotated[
    int | None,
    typer.Option(
        "--year",
        help="Calendar year (defaults to the current year)",
    ),
]
