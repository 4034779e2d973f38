"""Pydantic schemas for Comment model."""

import hashlib
from datetime import datetime
from typing import Any

from pydantic import Field, computed_field

from review_activity_db.db.models import CommentType

from .base import SchemaBase


def comment_identity(
    pr_github_id: int,
    commenter_id: int | None,
    created_at: datetime | None,
    body: str,
    github_comment_id: int | None = None,
) -> str:
    """Deterministic key for a comment.

    Built from the owning PR, the author, the timestamp and the text, so
    the same remote comment always maps to the same row. The remote
    comment id joins the key when known: comments posted in one review
    share a timestamp, and identical text from the same author there must
    stay separate rows. The comment type is left out.
    """
    stamp = created_at.isoformat() if created_at else ""
    parts = [str(pr_github_id), str(commenter_id or ""), stamp, body]
    if github_comment_id is not None:
        parts.append(str(github_comment_id))
    raw = "\x1f".join(parts)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class CommentUpsert(SchemaBase):
    """Normalized comment ready for persistence."""

    model_config = SchemaBase.model_config | {"str_strip_whitespace": False}

    type: CommentType
    body: str = ""
    commenter: str | None = Field(default=None, max_length=100)
    commenter_id: int | None = None
    github_comment_id: int | None = None
    created_at: datetime | None = None
    pull_request_id: int = Field(description="Local key of the owning PR")
    pr_github_id: int = Field(exclude=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def identity(self) -> str:
        return comment_identity(
            self.pr_github_id,
            self.commenter_id,
            self.created_at,
            self.body,
            self.github_comment_id,
        )

    def to_row(self) -> dict[str, Any]:
        """Column mapping for an insert statement."""
        return self.model_dump()


class CommentRead(SchemaBase):
    """Schema for reading comment data."""

    id: int
    type: CommentType
    body: str
    commenter: str | None
    commenter_id: int | None
    created_at: datetime | None
    pull_request_id: int
