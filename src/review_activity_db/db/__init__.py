"""Database module for Review Activity DB."""

from review_activity_db.db.engine import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
    get_engine,
    get_session,
    get_session_factory,
)
from review_activity_db.db.models import (
    SCORE_FIELDS,
    Base,
    Comment,
    CommentType,
    PRState,
    PullRequest,
    Team,
    TeamMembership,
    TrackedUser,
)
from review_activity_db.db.repositories import (
    BaseRepository,
    CommentRepository,
    PullRequestRepository,
    TeamRepository,
    TrackedUserRepository,
)

__all__ = [
    # Models
    "SCORE_FIELDS",
    "Base",
    "Comment",
    "CommentType",
    "PRState",
    "PullRequest",
    "Team",
    "TeamMembership",
    "TrackedUser",
    # Engine
    "build_engine",
    "build_session_factory",
    "create_tables",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Repositories
    "BaseRepository",
    "CommentRepository",
    "PullRequestRepository",
    "TeamRepository",
    "TrackedUserRepository",
]
