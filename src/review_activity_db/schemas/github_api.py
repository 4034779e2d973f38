"""Pydantic schemas for parsing GitHub API responses.

Payloads are parsed leniently: unknown fields are ignored and missing
ones fall back to defaults so a partial item never aborts a page.
See: https://docs.github.com/en/rest/search/search#search-issues-and-pull-requests
"""

from datetime import datetime

from pydantic import Field

from review_activity_db.db.models import CommentType, PRState

from .base import LenientModel
from .comment import CommentUpsert
from .pr import PRUpsert


class GitHubUser(LenientModel):
    """GitHub user object embedded in other payloads."""

    login: str = Field(default="", description="GitHub username")
    id: int | None = Field(default=None, description="GitHub user ID")
    type: str = Field(default="User", description="User type")


class GitHubUserProfile(GitHubUser):
    """Response of GET /users/{username}."""

    name: str | None = Field(default=None, description="Display name")
    avatar_url: str | None = None


class GitHubLabel(LenientModel):
    """GitHub label object from API responses."""

    name: str = Field(default="", description="Label name")


class GitHubPullRequestLinks(LenientModel):
    """``pull_request`` sub-object present on search items that are PRs."""

    html_url: str | None = None
    merged_at: datetime | None = Field(default=None, description="When PR was merged")


class GitHubSearchItem(LenientModel):
    """Issue/PR item from GET /search/issues."""

    id: int = Field(description="Remote PR id")
    number: int = Field(default=0, description="PR number")
    title: str = Field(default="", description="PR title")
    html_url: str = Field(default="", description="PR web URL")
    comments_url: str | None = None
    state: str = Field(default="open", description="open or closed")
    comments: int = Field(default=0, description="Conversation comment count")
    draft: bool = False
    user: GitHubUser = Field(default_factory=GitHubUser)
    labels: list[GitHubLabel] = Field(default_factory=list)
    pull_request: GitHubPullRequestLinks = Field(default_factory=GitHubPullRequestLinks)
    created_at: datetime
    closed_at: datetime | None = None

    def to_pr_upsert(self, user_github_id: int) -> PRUpsert:
        """
        Factory method to convert to the PR upsert schema.

        Args:
            user_github_id: GitHub id of the tracked author

        Returns:
            PRUpsert with every synced column populated
        """
        state = PRState.CLOSED if self.state == "closed" else PRState.OPEN
        return PRUpsert(
            github_id=self.id,
            title=self.title[:500],
            repository_url=self.html_url,
            comments_url=self.comments_url,
            number=self.number,
            state=state,
            labels=[label.name for label in self.labels] or None,
            total_comments=self.comments,
            draft=self.draft,
            created_at=self.created_at,
            merged_at=self.pull_request.merged_at,
            closed_at=self.closed_at,
            user_id=user_github_id,
        )


class GitHubComment(LenientModel):
    """Issue comment or review comment.

    Maps to: GET /repos/{owner}/{repo}/issues/{number}/comments
    and GET /repos/{owner}/{repo}/pulls/{number}/comments
    """

    id: int | None = None
    body: str | None = None
    user: GitHubUser | None = None
    created_at: datetime | None = None

    def to_comment_upsert(
        self,
        comment_type: CommentType,
        pull_request_id: int,
        pr_github_id: int,
    ) -> CommentUpsert:
        """Normalize into a :class:`CommentUpsert` tagged with its origin."""
        user = self.user or GitHubUser()
        return CommentUpsert(
            type=comment_type,
            body=self.body or "",
            commenter=user.login or None,
            commenter_id=user.id,
            github_comment_id=self.id,
            created_at=self.created_at,
            pull_request_id=pull_request_id,
            pr_github_id=pr_github_id,
        )
