"""Pydantic schemas for Review Activity DB.

This module provides input validation and output serialization models.
"""

from .base import LenientModel, SchemaBase
from .comment import CommentRead, CommentUpsert, comment_identity
from .github_api import (
    GitHubComment,
    GitHubLabel,
    GitHubPullRequestLinks,
    GitHubSearchItem,
    GitHubUser,
    GitHubUserProfile,
)
from .pr import PRRead, PRRef, PRUpsert
from .repository import parse_repo_url, repo_full_name
from .user import (
    SyncStatus,
    TeamRead,
    TrackedUserCreate,
    TrackedUserRead,
    UserSyncStatus,
    derive_sync_status,
)

__all__ = [
    # Base
    "LenientModel",
    "SchemaBase",
    # Comments
    "CommentRead",
    "CommentUpsert",
    "comment_identity",
    # GitHub API
    "GitHubComment",
    "GitHubLabel",
    "GitHubPullRequestLinks",
    "GitHubSearchItem",
    "GitHubUser",
    "GitHubUserProfile",
    # PR
    "PRRead",
    "PRRef",
    "PRUpsert",
    # Repository URLs
    "parse_repo_url",
    "repo_full_name",
    # Users and teams
    "SyncStatus",
    "TeamRead",
    "TrackedUserCreate",
    "TrackedUserRead",
    "UserSyncStatus",
    "derive_sync_status",
]
