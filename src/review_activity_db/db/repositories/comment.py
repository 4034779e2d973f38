"""Repository for Comment model operations."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import Comment

from .base import BaseRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from review_activity_db.schemas.comment import CommentUpsert

# Columns overwritten when the same comment is ingested again
_UPDATE_COLUMNS = [
    "type",
    "body",
    "commenter",
    "commenter_id",
    "github_comment_id",
    "created_at",
    "pull_request_id",
]


class CommentRepository(BaseRepository[Comment]):
    """Repository for issue and review comments."""

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
        batch_size: int = 200,
    ) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session
            write_lock: Optional lock to serialize write operations
            batch_size: Rows per upsert statement
        """
        super().__init__(session, Comment, write_lock)
        self._batch_size = batch_size

    async def get_by_identity(self, identity: str) -> Comment | None:
        """Get a comment by its content identity."""
        return await self._get_by_field("identity", identity)

    async def list_for_pull_requests(self, pr_ids: Iterable[int]) -> list[Comment]:
        """List comments for the given local PR ids, oldest first."""
        ids = list(pr_ids)
        if not ids:
            return []
        stmt = (
            select(Comment)
            .where(Comment.pull_request_id.in_(ids))
            .order_by(Comment.created_at, Comment.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_pull_request(self, pr_id: int) -> list[Comment]:
        """List comments for one PR, oldest first."""
        return await self.list_for_pull_requests([pr_id])

    async def upsert_many(self, comments: list[CommentUpsert]) -> int:
        """Insert or update comments keyed by identity.

        Duplicates inside ``comments`` collapse to the last occurrence.

        Returns:
            Number of distinct comments written
        """
        rows_by_identity = {c.identity: c.to_row() for c in comments}
        rows = list(rows_by_identity.values())
        for start in range(0, len(rows), self._batch_size):
            await self._upsert(
                rows[start : start + self._batch_size],
                conflict_column="identity",
                update_columns=_UPDATE_COLUMNS,
            )
        return len(rows)
