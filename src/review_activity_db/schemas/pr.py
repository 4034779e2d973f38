"""Pydantic schemas for PullRequest model."""

from datetime import datetime
from typing import Any

from pydantic import Field

from review_activity_db.db.models import PRState

from .base import SchemaBase


class PRUpsert(SchemaBase):
    """Fields written on every PR upsert.

    Scores are deliberately absent so a re-sync never resets them.
    """

    github_id: int = Field(description="Remote PR id (conflict key)")
    title: str = Field(default="", max_length=500)
    repository_url: str = Field(max_length=500, description="PR web URL")
    comments_url: str | None = Field(default=None, max_length=500)
    number: int = Field(ge=0)
    state: PRState = Field(default=PRState.OPEN)
    labels: list[str] | None = Field(default=None, description="Label names, None if unlabeled")
    total_comments: int = Field(default=0, ge=0)
    draft: bool = Field(default=False)
    created_at: datetime
    merged_at: datetime | None = None
    closed_at: datetime | None = None
    user_id: int = Field(description="Author's GitHub id")

    def to_row(self) -> dict[str, Any]:
        """Column mapping for an insert statement."""
        return self.model_dump()


class PRRef(SchemaBase):
    """Snapshot of a persisted PR handed to comment ingestion.

    Detached from any session so it can cross into a background task.
    """

    id: int
    github_id: int
    number: int
    title: str
    repository_url: str


class PRRead(SchemaBase):
    """Schema for reading PR data."""

    id: int
    github_id: int
    title: str
    repository_url: str
    number: int
    state: PRState
    labels: list[str] | None
    total_comments: int
    draft: bool
    created_at: datetime
    merged_at: datetime | None
    closed_at: datetime | None
    user_id: int
    code_quality: float
    logic_functionality: float
    performance_security: float
    testing_documentation: float
    ui_ux: float
