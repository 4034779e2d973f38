"""Loguru setup shared by the CLI, the sync engine and background workers.

Records carry a ``name`` extra (the module, or ``sync`` for per-user and
per-team loggers) plus optional ``user``, ``team``, ``repo`` and ``pr``
context. Standard library loggers (SQLAlchemy, httpx, aiosqlite) are
routed through loguru so one level setting controls everything.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_configured = False

_CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)

# Library logger -> (level when debugging, level otherwise)
_LIBRARY_LEVELS = {
    "sqlalchemy.engine": (logging.INFO, logging.WARNING),
    "httpx": (logging.DEBUG, logging.WARNING),
    "httpcore": (logging.DEBUG, logging.WARNING),
    "aiosqlite": (logging.INFO, logging.WARNING),
}


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru under the originating logger's name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging-module frames so loguru reports the library call site
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )


def _resolve_level(level: LogLevel, verbose: bool, quiet: bool) -> LogLevel:
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return level


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Install the console sink and, optionally, a rotating file sink.

    Args:
        level: Level from settings
        verbose: Force DEBUG (wins over ``quiet``)
        quiet: Force WARNING
        log_file: Path of a file sink that always records DEBUG and up
        rotation: Size or age at which the file rotates (e.g. "10 MB")
        retention: How long rotated files are kept
        serialize: Write the file sink as JSON lines

    Returns:
        The configured loguru logger
    """
    global _configured

    effective = _resolve_level(level, verbose, quiet)

    logger.remove()
    logger.configure(extra={"name": "review_activity_db"})
    logger.add(
        sys.stderr,
        level=effective,
        format=_CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    debugging = effective in ("TRACE", "DEBUG")
    for name, (debug_level, default_level) in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(debug_level if debugging else default_level)

    _configured = True
    return logger


def get_logger(name: str) -> Logger:
    """Module logger: ``logger = get_logger(__name__)``."""
    return logger.bind(name=name)


def bind_user(username: str) -> Logger:
    """Logger for work done on behalf of one tracked user."""
    return logger.bind(name="sync", user=username)


def bind_team(team_name: str) -> Logger:
    """Logger for a team-wide sync."""
    return logger.bind(name="sync", team=team_name)


def bind_pr(owner: str, repo: str, pr_number: int) -> Logger:
    """Logger for work on a single pull request.

    Args:
        owner: Repository owner
        repo: Repository name
        pr_number: PR number

    Returns:
        Logger with ``repo`` (``owner/repo``) and ``pr`` bound
    """
    return logger.bind(name="sync", repo=f"{owner}/{repo}", pr=pr_number)


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Drop every sink and mark logging unconfigured (used by tests)."""
    global _configured
    logger.remove()
    _configured = False
