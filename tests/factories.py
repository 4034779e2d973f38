"""Factory functions for creating test data.

This module provides factory functions for:
- SQLAlchemy ORM models (TrackedUser, Team, PullRequest, Comment)
- GitHub API payloads (search items, comments)

Design principles:
- Factories provide sensible defaults that can be overridden
- Model factories add to session but don't flush (tests control flush timing)
- Payload factories return dicts suitable for Pydantic model instantiation
"""

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import (
    Comment,
    CommentType,
    PRState,
    PullRequest,
    Team,
    TeamMembership,
    TrackedUser,
)
from review_activity_db.schemas.comment import comment_identity
from review_activity_db.schemas.github_api import GitHubSearchItem

# Import test timeline constants
from tests.conftest import JAN_10, JAN_15_ISO, JAN_16_ISO


# -----------------------------------------------------------------------------
# Model Factories
# -----------------------------------------------------------------------------
def make_user(
    session: AsyncSession,
    *,
    github_username: str = "octocat",
    github_id: int | None = 583231,
    last_pr_sync: datetime | None = None,
    last_comment_sync: datetime | None = None,
    **overrides: Any,
) -> TrackedUser:
    """Create a TrackedUser model instance.

    Args:
        session: Async database session (model will be added but not flushed)
        github_username: GitHub handle
        github_id: Remote account id (None for an unresolved user)
        last_pr_sync: PR watermark
        last_comment_sync: Comment watermark
        **overrides: Additional field overrides

    Returns:
        TrackedUser instance (added to session, not flushed)
    """
    user = TrackedUser(
        github_username=github_username,
        github_id=github_id,
        last_pr_sync=last_pr_sync,
        last_comment_sync=last_comment_sync,
        **overrides,
    )
    session.add(user)
    return user


def make_team(
    session: AsyncSession,
    *,
    name: str = "platform",
    description: str | None = None,
    **overrides: Any,
) -> Team:
    """Create a Team model instance (added to session, not flushed)."""
    team = Team(name=name, description=description, **overrides)
    session.add(team)
    return team


def make_membership(
    session: AsyncSession,
    team: Team,
    user: TrackedUser,
    *,
    assigned_at: datetime | None = None,
) -> TeamMembership:
    """Assign a user to a team. Both must be flushed to have IDs."""
    membership = TeamMembership(team_id=team.id, user_id=user.id)
    if assigned_at is not None:
        membership.assigned_at = assigned_at
    session.add(membership)
    return membership


def make_pull_request(
    session: AsyncSession,
    user: TrackedUser,
    *,
    github_id: int = 2001,
    number: int = 42,
    title: str | None = None,
    repository_url: str | None = None,
    state: PRState = PRState.OPEN,
    created_at: datetime = JAN_10,
    merged_at: datetime | None = None,
    closed_at: datetime | None = None,
    **overrides: Any,
) -> PullRequest:
    """Create a PullRequest model instance.

    Args:
        session: Async database session (model will be added but not flushed)
        user: Author (must have a github_id)
        github_id: Remote PR id
        number: PR number
        title: PR title (defaults to "Test PR #{number}")
        repository_url: PR web URL (defaults to octo/repo)
        state: OPEN or CLOSED
        created_at: Creation time
        merged_at: Merge time, if merged
        closed_at: Close time, if closed
        **overrides: Additional field overrides

    Returns:
        PullRequest instance (added to session, not flushed)
    """
    pr = PullRequest(
        github_id=github_id,
        number=number,
        title=title or f"Test PR #{number}",
        repository_url=repository_url or f"https://github.com/octo/repo/pull/{number}",
        state=state,
        created_at=created_at,
        merged_at=merged_at,
        closed_at=closed_at,
        user_id=user.github_id,
        **overrides,
    )
    session.add(pr)
    return pr


def make_comment(
    session: AsyncSession,
    pr: PullRequest,
    *,
    body: str = "Looks good",
    comment_type: CommentType = CommentType.ISSUE,
    commenter: str | None = "reviewer",
    commenter_id: int | None = 9001,
    created_at: datetime | None = JAN_10,
    **overrides: Any,
) -> Comment:
    """Create a Comment model instance. The PR must be flushed to have an ID."""
    comment = Comment(
        identity=comment_identity(pr.github_id, commenter_id, created_at, body),
        type=comment_type,
        body=body,
        commenter=commenter,
        commenter_id=commenter_id,
        created_at=created_at,
        pull_request_id=pr.id,
        **overrides,
    )
    session.add(comment)
    return comment


# -----------------------------------------------------------------------------
# GitHub API Payload Factories
# -----------------------------------------------------------------------------
def make_github_user(login: str = "octocat", user_id: int | None = 583231) -> dict[str, Any]:
    """Create a GitHub user dict."""
    return {"login": login, "id": user_id, "type": "User"}


def make_search_item(
    github_id: int = 2001,
    *,
    number: int | None = None,
    title: str | None = None,
    owner: str = "octo",
    repo: str = "repo",
    state: str = "open",
    created_at: str = JAN_15_ISO,
    closed_at: str | None = None,
    merged_at: str | None = None,
    labels: list[str] | None = None,
    comments: int = 0,
    host: str = "github.com",
    **overrides: Any,
) -> dict[str, Any]:
    """Create a search/issues item dict for a pull request.

    Args:
        github_id: Remote PR id
        number: PR number (defaults to github_id)
        title: PR title (defaults to "PR {github_id}")
        owner: Repository owner
        repo: Repository name
        state: "open" or "closed"
        created_at: ISO creation timestamp
        closed_at: ISO close timestamp
        merged_at: ISO merge timestamp
        labels: Label names
        comments: Conversation comment count
        host: Web host used in html_url
        **overrides: Additional field overrides

    Returns:
        Dict matching the GitHub search API item shape
    """
    number = number if number is not None else github_id
    return {
        "id": github_id,
        "number": number,
        "title": title or f"PR {github_id}",
        "html_url": f"https://{host}/{owner}/{repo}/pull/{number}",
        "comments_url": f"https://api.{host}/repos/{owner}/{repo}/issues/{number}/comments",
        "state": state,
        "comments": comments,
        "draft": False,
        "user": make_github_user(),
        "labels": [{"id": i, "name": name} for i, name in enumerate(labels or [])],
        "pull_request": {
            "html_url": f"https://{host}/{owner}/{repo}/pull/{number}",
            "merged_at": merged_at,
        },
        "created_at": created_at,
        "closed_at": closed_at,
        **overrides,
    }


def make_search_items(ids: range | list[int], **kwargs: Any) -> list[GitHubSearchItem]:
    """Parsed search items for a run of ids."""
    return [GitHubSearchItem.model_validate(make_search_item(i, **kwargs)) for i in ids]


def make_github_comment(
    comment_id: int = 7001,
    *,
    body: str = "Please add a test",
    login: str = "reviewer",
    user_id: int | None = 9001,
    created_at: str = JAN_16_ISO,
    **overrides: Any,
) -> dict[str, Any]:
    """Create an issue or review comment dict."""
    return {
        "id": comment_id,
        "body": body,
        "user": make_github_user(login, user_id),
        "created_at": created_at,
        **overrides,
    }


# -----------------------------------------------------------------------------
# Assertion Helpers
# -----------------------------------------------------------------------------
def pull_request_fields(pr: PullRequest) -> dict[str, Any]:
    """Mapped column values of a PR, minus the ``synced_at`` refresh stamp."""
    return {
        column.key: getattr(pr, column.key)
        for column in PullRequest.__table__.columns
        if column.key != "synced_at"
    }
