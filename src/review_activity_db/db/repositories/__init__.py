"""Repository pattern implementation for database access.

This module provides repository classes that encapsulate all database
access logic, providing a clean abstraction over SQLAlchemy models.
"""

from .base import BaseRepository
from .comment import CommentRepository
from .pull_request import PullRequestRepository
from .team import TeamRepository
from .user import TrackedUserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "PullRequestRepository",
    "TeamRepository",
    "TrackedUserRepository",
]
