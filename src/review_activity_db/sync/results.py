"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from review_activity_db.schemas.pr import PRRef


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class ItemError:
    """Failure confined to a single PR during comment ingestion."""

    pr_github_id: int
    pr_number: int
    url: str
    stage: str
    """``parse`` when owner/repo could not be derived, ``fetch`` for API failures."""

    error: str
    error_type: str

    @classmethod
    def from_exception(cls, pr: PRRef, stage: str, exc: Exception) -> ItemError:
        return cls(
            pr_github_id=pr.github_id,
            pr_number=pr.number,
            url=pr.repository_url,
            stage=stage,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "pr_github_id": self.pr_github_id,
            "pr_number": self.pr_number,
            "url": self.url,
            "stage": self.stage,
            "error": self.error,
            "error_type": self.error_type,
        }


@dataclass
class ReconciliationResult:
    """Outcome of one PR reconciliation run for a user."""

    username: str
    since: date
    prs: list[PRRef] = field(default_factory=list)
    """Exactly the PRs upserted in this run, in fetch order."""

    searched_count: int = 0
    """Items returned by the created-since search."""

    open_count: int = 0
    """Items returned by the open-PR search (before de-duplication)."""

    synced_at: datetime | None = None

    @property
    def prs_synced(self) -> int:
        return len(self.prs)

    def to_dict(self) -> dict[str, object]:
        return {
            "username": self.username,
            "since": _iso(self.since),
            "prs_synced": self.prs_synced,
            "searched_count": self.searched_count,
            "open_count": self.open_count,
            "synced_at": _iso(self.synced_at),
        }


@dataclass
class CommentIngestionResult:
    """Outcome of one comment ingestion run for a user's PR batch."""

    username: str
    prs_total: int = 0
    prs_processed: int = 0
    issue_comments: int = 0
    review_comments: int = 0
    errors: list[ItemError] = field(default_factory=list)
    """Per-PR failures; these never stop the run."""

    fatal_error: Exception | None = None
    """Persistence failure that aborted the run before the watermark moved."""

    synced_at: datetime | None = None

    @property
    def success(self) -> bool:
        """True when comments were persisted and the watermark advanced."""
        return self.fatal_error is None

    @property
    def total_comments(self) -> int:
        return self.issue_comments + self.review_comments

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {
            "success": self.success,
            "username": self.username,
            "prs_total": self.prs_total,
            "prs_processed": self.prs_processed,
            "issue_comments": self.issue_comments,
            "review_comments": self.review_comments,
            "errors": [e.to_dict() for e in self.errors],
            "synced_at": _iso(self.synced_at),
        }
        if self.fatal_error is not None:
            result["error"] = str(self.fatal_error)
            result["error_type"] = type(self.fatal_error).__name__
        return result

    @classmethod
    def from_error(
        cls, username: str, error: Exception, prs_total: int = 0
    ) -> CommentIngestionResult:
        """Create a result representing an aborted run."""
        return cls(username=username, prs_total=prs_total, fatal_error=error)


@dataclass
class UserSyncResult:
    """Response of a single-user sync trigger."""

    username: str
    reconciliation: ReconciliationResult
    comments_processing: bool = True
    """Comment ingestion was handed off and may still be running."""

    @property
    def prs_synced(self) -> int:
        return self.reconciliation.prs_synced

    def to_dict(self) -> dict[str, object]:
        return {
            "success": True,
            "username": self.username,
            "prs_synced": self.prs_synced,
            "comments_processing": self.comments_processing,
        }


@dataclass
class MemberSyncResult:
    """Per-member outcome within a team sync."""

    github_name: str
    success: bool
    prs_synced: int = 0
    error: str | None = None
    error_type: str | None = None

    @classmethod
    def from_error(cls, github_name: str, error: Exception) -> MemberSyncResult:
        return cls(
            github_name=github_name,
            success=False,
            error=str(error),
            error_type=type(error).__name__,
        )

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {"github_name": self.github_name, "success": self.success}
        if self.success:
            result["prs_synced"] = self.prs_synced
        else:
            result["error"] = self.error
            result["error_type"] = self.error_type
        return result


@dataclass
class TeamSyncResult:
    """Aggregate outcome of syncing every member of a team."""

    team_id: int
    team_name: str
    members: list[MemberSyncResult] = field(default_factory=list)
    last_sync: datetime | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for m in self.members if m.success)

    @property
    def failed(self) -> int:
        return sum(1 for m in self.members if not m.success)

    @property
    def total_prs_synced(self) -> int:
        return sum(m.prs_synced for m in self.members if m.success)

    def to_dict(self) -> dict[str, object]:
        return {
            "success": True,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total_prs_synced": self.total_prs_synced,
            "last_sync": _iso(self.last_sync),
            "results": [m.to_dict() for m in self.members],
        }
