"""Comment ingestion - fetch, normalize and persist comments for a PR batch.

Runs after reconciliation against exactly the PRs that run upserted.
Per-PR problems (unparseable URL, API failure) are recorded and skipped;
a persistence failure aborts the run and leaves ``last_comment_sync``
where it was.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from review_activity_db.config import get_settings
from review_activity_db.db.models import CommentType, TrackedUser
from review_activity_db.db.repositories import CommentRepository, TrackedUserRepository
from review_activity_db.github.exceptions import GitHubClientError
from review_activity_db.logging import bind_pr, bind_user
from review_activity_db.schemas.comment import CommentUpsert
from review_activity_db.schemas.repository import parse_repo_url

from .commit_manager import CommitManager
from .progress import MessageCallback, MessageEmitter, ProgressTracker, WorkerEventType
from .results import CommentIngestionResult, ItemError

if TYPE_CHECKING:
    from review_activity_db.github.client import GitHubClient
    from review_activity_db.schemas.pr import PRRef

    from .progress import ProgressCallback


class CommentIngestionPipeline:
    """Fetches and stores issue and review comments for a user's PRs.

    Usage:
        pipeline = CommentIngestionPipeline(
            client=client,
            user_repository=TrackedUserRepository(session),
            comment_repository=CommentRepository(session),
        )
        result = await pipeline.run(user, reconciliation.prs)
    """

    def __init__(
        self,
        client: GitHubClient,
        user_repository: TrackedUserRepository,
        comment_repository: CommentRepository,
        *,
        web_host: str | None = None,
        write_lock: asyncio.Lock | None = None,
        batch_size: int | None = None,
        on_message: MessageCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            client: GitHub API client
            user_repository: Repository owning the comment watermark
            comment_repository: Repository for Comment rows
            web_host: Host PR URLs must belong to (default from settings)
            write_lock: Lock shared with the repositories, if any
            batch_size: Comments per commit (default from settings)
            on_message: Receives WorkerMessage events
            on_progress: Receives ProgressUpdate snapshots
        """
        settings = get_settings()
        self._client = client
        self._user_repository = user_repository
        self._comment_repository = comment_repository
        self._web_host = web_host or settings.github_web_host
        self._write_lock = write_lock
        self._batch_size = batch_size or settings.sync.comment_batch_size
        self._on_message = on_message
        self._on_progress = on_progress

    async def run(self, user: TrackedUser, prs: list[PRRef]) -> CommentIngestionResult:
        """Ingest comments for ``prs`` and advance ``last_comment_sync``.

        Args:
            user: Owner of the PR batch
            prs: Exactly the PRs from the preceding reconciliation

        Returns:
            CommentIngestionResult; ``success`` is False only when persistence
            failed, in which case the watermark did not move
        """
        username = user.github_username
        emitter = MessageEmitter(username, self._on_message)
        tracker = ProgressTracker(total=len(prs), name=f"comments for {username}")
        if self._on_progress is not None:
            tracker.on_progress(self._on_progress)

        result = CommentIngestionResult(username=username, prs_total=len(prs))
        issue_batch: list[CommentUpsert] = []
        review_batch: list[CommentUpsert] = []

        emitter.emit(
            WorkerEventType.PROGRESS,
            f"Processing comments for {len(prs)} PRs",
            total=len(prs),
        )
        tracker.start()

        for index, pr in enumerate(prs, start=1):
            tracker.set_current(f"#{pr.number}")
            try:
                owner, repo = parse_repo_url(pr.repository_url, self._web_host)
            except ValueError as e:
                result.errors.append(ItemError.from_exception(pr, "parse", e))
                tracker.increment_failed(error=str(e))
                emitter.emit(
                    WorkerEventType.WARNING,
                    f"Skipping PR #{pr.number}: {e}",
                    pr_github_id=pr.github_id,
                )
                continue

            pr_log = bind_pr(owner, repo, pr.number)
            try:
                issue_comments = await self._client.list_issue_comments(owner, repo, pr.number)
                review_comments = await self._client.list_review_comments(owner, repo, pr.number)
            except GitHubClientError as e:
                result.errors.append(ItemError.from_exception(pr, "fetch", e))
                tracker.increment_failed(error=str(e))
                emitter.emit(
                    WorkerEventType.WARNING,
                    f"Failed to fetch comments for {owner}/{repo}#{pr.number}: {e}",
                    pr_github_id=pr.github_id,
                )
                continue

            issue_batch.extend(
                c.to_comment_upsert(CommentType.ISSUE, pr.id, pr.github_id) for c in issue_comments
            )
            review_batch.extend(
                c.to_comment_upsert(CommentType.REVIEW, pr.id, pr.github_id)
                for c in review_comments
            )
            result.prs_processed += 1
            pr_log.debug(
                "Fetched {} issue and {} review comments",
                len(issue_comments),
                len(review_comments),
            )
            tracker.increment()
            emitter.emit(
                WorkerEventType.PROGRESS,
                f"Processed {index}/{len(prs)} PRs",
                completed=index,
                total=len(prs),
            )

        session = self._comment_repository.session
        commit_manager = CommitManager(session, self._write_lock, self._batch_size)
        try:
            result.issue_comments = await self._persist(issue_batch, commit_manager)
            result.review_comments = await self._persist(review_batch, commit_manager)
            await commit_manager.finalize()
            result.synced_at = await self._user_repository.mark_comments_synced(user)
            await session.commit()
        except Exception as e:
            await session.rollback()
            result.fatal_error = e
            tracker.fail(str(e))
            emitter.emit(WorkerEventType.ERROR, f"Failed to store comments: {e}")
            return result

        tracker.complete()
        bind_user(username).info(
            "Stored {} issue and {} review comments ({} PRs skipped)",
            result.issue_comments,
            result.review_comments,
            len(result.errors),
        )
        emitter.emit(
            WorkerEventType.SUCCESS,
            f"Stored {result.total_comments} comments from {result.prs_processed} PRs",
            issue_comments=result.issue_comments,
            review_comments=result.review_comments,
            errors=len(result.errors),
        )
        return result

    async def _persist(self, comments: list[CommentUpsert], commit_manager: CommitManager) -> int:
        written = 0
        for start in range(0, len(comments), self._batch_size):
            batch = comments[start : start + self._batch_size]
            count = await self._comment_repository.upsert_many(batch)
            await commit_manager.record(count)
            written += count
        return written
