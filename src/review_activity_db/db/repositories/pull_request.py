"""Repository for PullRequest model CRUD operations."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from review_activity_db.db.models import SCORE_FIELDS, PullRequest

from .base import BaseRepository

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from review_activity_db.schemas.pr import PRUpsert

# Keeps each statement well under SQLite's bound-parameter limit
UPSERT_CHUNK_SIZE = 500


class PullRequestRepository(BaseRepository[PullRequest]):
    """Repository for PullRequest entities.

    PRs are keyed by their remote ``github_id``. Sync writes go through
    :meth:`upsert_many`, which overwrites every synced column and leaves
    the subscores alone; only :meth:`update_scores` writes those.
    """

    def __init__(
        self,
        session: AsyncSession,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        super().__init__(session, PullRequest, write_lock)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_github_id(self, github_id: int) -> PullRequest | None:
        """Get a PR by its remote id."""
        return await self._get_by_field("github_id", github_id)

    async def get_by_github_ids(self, github_ids: Iterable[int]) -> list[PullRequest]:
        """Get PRs by remote id, in the order the ids were given.

        Ids with no stored row are skipped.
        """
        ids = list(dict.fromkeys(github_ids))
        if not ids:
            return []
        stmt = select(PullRequest).where(PullRequest.github_id.in_(ids))
        result = await self._session.execute(stmt)
        by_id = {pr.github_id: pr for pr in result.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    async def list_for_user(
        self,
        user_github_id: int,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[PullRequest]:
        """List a user's PRs, optionally bounded by creation time.

        Args:
            user_github_id: Author's remote id
            start: Inclusive lower bound on ``created_at``
            end: Inclusive upper bound on ``created_at``

        Returns:
            PRs ordered newest first
        """
        stmt = select(PullRequest).where(PullRequest.user_id == user_github_id)
        if start is not None:
            stmt = stmt.where(PullRequest.created_at >= start)
        if end is not None:
            stmt = stmt.where(PullRequest.created_at <= end)
        stmt = stmt.order_by(PullRequest.created_at.desc(), PullRequest.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def upsert_many(self, records: list[PRUpsert]) -> list[PullRequest]:
        """Insert or update PRs keyed by remote id.

        Re-running with the same input leaves exactly one row per
        ``github_id`` with identical field values. Scores are never reset.

        Args:
            records: Mapped PR payloads

        Returns:
            The persisted rows (with local ids), in input order
        """
        if not records:
            return []

        now = datetime.now(UTC)
        # One row per conflict key per statement; later records win
        rows_by_id = {r.github_id: {**r.to_row(), "synced_at": now} for r in records}
        rows = list(rows_by_id.values())
        update_columns = [col for col in rows[0] if col not in ("github_id", *SCORE_FIELDS)]

        for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
            await self._upsert(
                rows[start : start + UPSERT_CHUNK_SIZE],
                conflict_column="github_id",
                update_columns=update_columns,
            )

        # Bulk upserts bypass the identity map; reload current values
        ids = [record.github_id for record in records]
        stmt = (
            select(PullRequest)
            .where(PullRequest.github_id.in_(ids))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        by_id = {pr.github_id: pr for pr in result.scalars().all()}
        return [by_id[i] for i in dict.fromkeys(ids)]

    async def update_scores(
        self,
        github_id: int,
        scores: Mapping[str, float],
    ) -> PullRequest | None:
        """Write subscores for a PR.

        Unknown keys are ignored.

        Args:
            github_id: Remote PR id
            scores: Mapping of score column to value

        Returns:
            Updated PR or None if not found
        """
        pr = await self.get_by_github_id(github_id)
        if pr is None:
            return None

        for field in SCORE_FIELDS:
            if field in scores:
                setattr(pr, field, float(scores[field]))

        await self.flush()
        return pr
