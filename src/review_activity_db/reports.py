"""Read-only activity reports over synced PRs and comments.

Plain aggregation: counts per user, per team member and per repository.
No weighting or ranking is applied.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from review_activity_db.db.repositories import (
    CommentRepository,
    PullRequestRepository,
    TeamRepository,
    TrackedUserRepository,
)
from review_activity_db.exceptions import (
    MissingGitHubIdError,
    TeamNotFoundError,
    UserNotFoundError,
)
from review_activity_db.schemas.repository import repo_full_name

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from review_activity_db.db.models import Comment, PullRequest, Team, TrackedUser

TIMELINE_DAYS = {
    "week": 7,
    "2weeks": 14,
    "month": 30,
    "3months": 90,
    "6months": 180,
    "year": 365,
}
DEFAULT_TIMELINE_DAYS = 30


def timeline_start(timeline: str, now: datetime | None = None) -> datetime:
    """Start of a named look-back window; unknown names mean 30 days."""
    now = now or datetime.now(UTC)
    return now - timedelta(days=TIMELINE_DAYS.get(timeline, DEFAULT_TIMELINE_DAYS))


def current_quarter(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"Q{(now.month - 1) // 3 + 1}"


def quarter_bounds(quarter: str, year: int) -> tuple[datetime, datetime]:
    """Inclusive UTC bounds of a calendar quarter.

    Args:
        quarter: ``Q1``..``Q4`` (case-insensitive) or ``1``..``4``
        year: Calendar year

    Returns:
        (first instant, last instant) of the quarter

    Raises:
        ValueError: If ``quarter`` is not a valid quarter
    """
    label = quarter.strip().upper().removeprefix("Q")
    if label not in ("1", "2", "3", "4"):
        raise ValueError(f"Invalid quarter: {quarter!r} (expected Q1-Q4)")

    first_month = (int(label) - 1) * 3 + 1
    start = datetime(year, first_month, 1, tzinfo=UTC)
    if first_month == 10:
        next_start = datetime(year + 1, 1, 1, tzinfo=UTC)
    else:
        next_start = datetime(year, first_month + 3, 1, tzinfo=UTC)
    return start, next_start - timedelta(microseconds=1)


# ------------------------------------------------------------------------------
# Report models
# ------------------------------------------------------------------------------
class UserSummary(BaseModel):
    """PR and comment totals for one user."""

    github_username: str
    timeline: str
    total_prs: int = 0
    merged_prs: int = 0
    open_prs: int = 0
    closed_prs: int = 0  # closed without merge
    total_comments: int = 0


class RepoActivity(BaseModel):
    repo_name: str
    pr_count: int = 0
    comments_received: int = 0


class MemberBreakdown(BaseModel):
    github_username: str
    total_prs: int = 0
    merged_prs: int = 0
    total_comments: int = 0
    repos: list[RepoActivity] = Field(default_factory=list)


class TeamBreakdown(BaseModel):
    """Per-member activity of a team, optionally limited to one quarter."""

    team_id: int
    team_name: str
    quarter: str | None = None
    year: int | None = None
    members: list[MemberBreakdown] = Field(default_factory=list)

    @property
    def total_prs(self) -> int:
        return sum(m.total_prs for m in self.members)

    @property
    def total_comments(self) -> int:
        return sum(m.total_comments for m in self.members)


class MemberCommentOrigins(BaseModel):
    github_username: str
    total_prs: int = 0
    from_own_team: int = 0
    from_others: int = 0  # known commenter outside the team
    unknown_author: int = 0  # no commenter id recorded

    @property
    def total_comments(self) -> int:
        return self.from_own_team + self.from_others + self.unknown_author


class CommentOriginReport(BaseModel):
    """Where the comments on a team's PRs came from during one quarter."""

    team_id: int
    team_name: str
    quarter: str
    year: int
    members: list[MemberCommentOrigins] = Field(default_factory=list)


# ------------------------------------------------------------------------------
# Report service
# ------------------------------------------------------------------------------
class ReportService:
    """Builds reports from the local database only.

    Usage:
        async with get_session() as session:
            summary = await ReportService(session).user_summary("octocat", "month")
    """

    def __init__(self, session: AsyncSession) -> None:
        self._users = TrackedUserRepository(session)
        self._teams = TeamRepository(session)
        self._prs = PullRequestRepository(session)
        self._comments = CommentRepository(session)

    async def _member_activity(
        self,
        user: TrackedUser,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[list[PullRequest], dict[int, list[Comment]]]:
        if user.github_id is None:
            return [], {}
        prs = await self._prs.list_for_user(user.github_id, start=start, end=end)
        comments: dict[int, list[Comment]] = defaultdict(list)
        for comment in await self._comments.list_for_pull_requests(pr.id for pr in prs):
            comments[comment.pull_request_id].append(comment)
        return prs, comments

    async def _get_team(self, team_id: int) -> Team:
        team = await self._teams.get_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(team_id)
        return team

    async def user_summary(
        self,
        username: str,
        timeline: str | None = None,
        *,
        now: datetime | None = None,
    ) -> UserSummary:
        """Totals for one user, optionally limited to a look-back window.

        Raises:
            UserNotFoundError: If the user is not tracked
            MissingGitHubIdError: If the user has no remote id
        """
        user = await self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        if user.github_id is None:
            raise MissingGitHubIdError(user.github_username)

        start = timeline_start(timeline, now) if timeline else None
        prs, comments = await self._member_activity(user, start, None)
        merged = sum(1 for pr in prs if pr.is_merged)
        still_open = sum(1 for pr in prs if pr.is_open)
        return UserSummary(
            github_username=user.github_username,
            timeline=timeline or "all",
            total_prs=len(prs),
            merged_prs=merged,
            open_prs=still_open,
            closed_prs=len(prs) - merged - still_open,
            total_comments=sum(len(c) for c in comments.values()),
        )

    async def team_breakdown(
        self,
        team_id: int,
        quarter: str | None = None,
        year: int | None = None,
    ) -> TeamBreakdown:
        """Per-member PR, merge and comment counts grouped by repository.

        Without ``quarter`` all stored PRs are counted; ``year`` defaults
        to the current year when a quarter is given.

        Raises:
            TeamNotFoundError: If the team does not exist
            ValueError: If ``quarter`` is invalid
        """
        team = await self._get_team(team_id)
        start = end = None
        if quarter:
            year = year or datetime.now(UTC).year
            start, end = quarter_bounds(quarter, year)

        report = TeamBreakdown(team_id=team.id, team_name=team.name, quarter=quarter, year=year)
        for user in await self._teams.get_members(team_id):
            prs, comments = await self._member_activity(user, start, end)
            repos: dict[str, RepoActivity] = {}
            for pr in prs:
                name = repo_full_name(pr.repository_url) or "unknown"
                activity = repos.setdefault(name, RepoActivity(repo_name=name))
                activity.pr_count += 1
                activity.comments_received += len(comments.get(pr.id, []))

            report.members.append(
                MemberBreakdown(
                    github_username=user.github_username,
                    total_prs=len(prs),
                    merged_prs=sum(1 for pr in prs if pr.is_merged),
                    total_comments=sum(len(c) for c in comments.values()),
                    repos=list(repos.values()),
                )
            )
        return report

    async def comment_origin_analysis(
        self,
        team_id: int,
        quarter: str | None = None,
        year: int | None = None,
    ) -> CommentOriginReport:
        """Split comments on each member's PRs by who wrote them.

        Defaults to the current quarter of the current year.

        Raises:
            TeamNotFoundError: If the team does not exist
            ValueError: If ``quarter`` is invalid
        """
        team = await self._get_team(team_id)
        now = datetime.now(UTC)
        quarter = quarter or current_quarter(now)
        year = year or now.year
        start, end = quarter_bounds(quarter, year)

        members = await self._teams.get_members(team_id)
        team_ids = {m.github_id for m in members if m.github_id is not None}

        report = CommentOriginReport(
            team_id=team.id, team_name=team.name, quarter=quarter, year=year
        )
        for user in members:
            prs, comments = await self._member_activity(user, start, end)
            origins = MemberCommentOrigins(github_username=user.github_username, total_prs=len(prs))
            for pr_comments in comments.values():
                for comment in pr_comments:
                    if comment.commenter_id is None:
                        origins.unknown_author += 1
                    elif comment.commenter_id in team_ids:
                        origins.from_own_team += 1
                    else:
                        origins.from_others += 1
            report.members.append(origins)
        return report
