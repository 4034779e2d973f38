"""Schemas for tracked users, teams and their sync state."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import Field

from .base import SchemaBase


class SyncStatus(str, Enum):
    """Derived state of a user's two-phase sync."""

    NOT_STARTED = "not_started"
    PROCESSING = "processing"  # PRs synced, comments pending or in flight
    COMPLETED = "completed"


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; values are always written as UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def derive_sync_status(
    last_pr_sync: datetime | None,
    last_comment_sync: datetime | None,
) -> SyncStatus:
    """Compute the tri-state status from the two watermarks.

    ``completed`` requires comments to have caught up with the latest PR
    sync; any other combination with at least one watermark set is
    ``processing``.
    """
    pr_sync = _as_utc(last_pr_sync)
    comment_sync = _as_utc(last_comment_sync)

    if comment_sync is not None:
        if pr_sync is not None and comment_sync >= pr_sync:
            return SyncStatus.COMPLETED
        return SyncStatus.PROCESSING
    if pr_sync is not None:
        return SyncStatus.PROCESSING
    return SyncStatus.NOT_STARTED


class UserSyncStatus(SchemaBase):
    """Sync status report for one user."""

    github_username: str
    status: SyncStatus
    last_pr_sync: datetime | None = None
    last_comment_sync: datetime | None = None

    @classmethod
    def from_user(cls, user: Any) -> "UserSyncStatus":
        """Build from a TrackedUser row."""
        return cls(
            github_username=user.github_username,
            status=derive_sync_status(user.last_pr_sync, user.last_comment_sync),
            last_pr_sync=_as_utc(user.last_pr_sync),
            last_comment_sync=_as_utc(user.last_comment_sync),
        )


class TrackedUserCreate(SchemaBase):
    """Schema for registering a tracked user."""

    github_username: str = Field(min_length=1, max_length=100)
    github_id: int | None = None
    display_name: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = Field(default=None, max_length=500)


class TrackedUserRead(SchemaBase):
    """Schema for reading tracked user data."""

    id: int
    github_username: str
    github_id: int | None
    display_name: str | None
    last_pr_sync: datetime | None
    last_comment_sync: datetime | None


class TeamRead(SchemaBase):
    """Schema for reading team data."""

    id: int
    name: str
    description: str | None
    last_sync: datetime | None
