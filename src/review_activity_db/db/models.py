"""SQLAlchemy ORM models for Review Activity DB."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class PRState(str, Enum):
    """Pull request state as reported by the search API."""

    OPEN = "open"
    CLOSED = "closed"  # merged or closed without merge


class CommentType(str, Enum):
    """Origin of a comment on a pull request."""

    ISSUE = "issue"  # conversation tab
    REVIEW = "review"  # inline on the diff


# Subscore columns written only by the scoring service
SCORE_FIELDS = (
    "code_quality",
    "logic_functionality",
    "performance_security",
    "testing_documentation",
    "ui_ux",
)


# ------------------------------------------------------------------------------
# TrackedUser model
# ------------------------------------------------------------------------------
class TrackedUser(Base):
    """Engineer whose PR and comment activity is synchronized.

    The two watermarks drive incremental sync: ``last_pr_sync`` moves
    after PR records are committed, ``last_comment_sync`` after the
    comments for that batch are committed.
    """

    __tablename__ = "tracked_users"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_username: Mapped[str] = mapped_column(String(100), unique=True)
    github_id: Mapped[int | None] = mapped_column(BigInteger, unique=True, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    last_pr_sync: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_comment_sync: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    memberships: Mapped[list["TeamMembership"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<TrackedUser(id={self.id}, github_username='{self.github_username}')>"


# ------------------------------------------------------------------------------
# Team models
# ------------------------------------------------------------------------------
class Team(Base):
    """Named group of tracked users."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_sync: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    memberships: Mapped[list["TeamMembership"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


class TeamMembership(Base):
    """Assignment of a tracked user to a team."""

    __tablename__ = "team_memberships"

    id: Mapped[int] = mapped_column(primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("tracked_users.id", ondelete="CASCADE"))
    assigned_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    assigned_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    team: Mapped["Team"] = relationship(back_populates="memberships")
    user: Mapped["TrackedUser"] = relationship(back_populates="memberships")

    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    def __repr__(self) -> str:
        return f"<TeamMembership(team_id={self.team_id}, user_id={self.user_id})>"


# ------------------------------------------------------------------------------
# PullRequest model
# ------------------------------------------------------------------------------
class PullRequest(Base):
    """Pull request authored by a tracked user.

    ``github_id`` is the remote identity and the upsert conflict key.
    The subscores are never touched by sync.
    """

    __tablename__ = "pull_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    github_id: Mapped[int] = mapped_column(BigInteger, unique=True)

    # --------------------------------------------------------------------------
    # Synced fields (overwritten on every upsert)
    # --------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(String(500))
    repository_url: Mapped[str] = mapped_column(String(500))  # PR web URL
    comments_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    number: Mapped[int] = mapped_column()
    state: Mapped[PRState] = mapped_column(default=PRState.OPEN)
    labels: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    total_comments: Mapped[int] = mapped_column(default=0)
    draft: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    merged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tracked_users.github_id"))

    # --------------------------------------------------------------------------
    # Scores (0-10, written by the scoring service)
    # --------------------------------------------------------------------------
    code_quality: Mapped[float] = mapped_column(default=0)
    logic_functionality: Mapped[float] = mapped_column(default=0)
    performance_security: Mapped[float] = mapped_column(default=0)
    testing_documentation: Mapped[float] = mapped_column(default=0)
    ui_ux: Mapped[float] = mapped_column(default=0)

    # --------------------------------------------------------------------------
    # Metadata
    # --------------------------------------------------------------------------
    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now())

    comments: Mapped[list["Comment"]] = relationship(back_populates="pull_request")

    __table_args__ = (Index("ix_pull_requests_user_created", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<PullRequest(id={self.id}, github_id={self.github_id}, number={self.number})>"

    @property
    def is_open(self) -> bool:
        """Check if PR is still open."""
        return self.state == PRState.OPEN

    @property
    def is_merged(self) -> bool:
        """Check if PR was merged."""
        return self.merged_at is not None


# ------------------------------------------------------------------------------
# Comment model
# ------------------------------------------------------------------------------
class Comment(Base):
    """Issue or review comment left on a synced pull request.

    ``identity`` is a content hash; re-ingesting the same comment updates
    the existing row.
    """

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    identity: Mapped[str] = mapped_column(String(64), unique=True)
    type: Mapped[CommentType] = mapped_column()
    body: Mapped[str] = mapped_column(Text, default="")
    commenter: Mapped[str | None] = mapped_column(String(100), nullable=True)
    commenter_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    github_comment_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    pull_request_id: Mapped[int] = mapped_column(
        ForeignKey("pull_requests.id", ondelete="CASCADE"), index=True
    )

    pull_request: Mapped["PullRequest"] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, type={self.type.value}, pr={self.pull_request_id})>"
