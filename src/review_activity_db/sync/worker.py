"""Background hand-off for comment ingestion.

Reconciliation returns to its caller as soon as PRs are stored; the
comment phase runs as a separate asyncio task with its own engine and
session so it never shares a connection or transaction with the caller.
Failures are logged and reported through messages, never raised into the
code that triggered the sync.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from review_activity_db.config import get_settings
from review_activity_db.db.engine import build_engine, build_session_factory
from review_activity_db.db.repositories import CommentRepository, TrackedUserRepository
from review_activity_db.exceptions import UserNotFoundError
from review_activity_db.github.client import GitHubClient
from review_activity_db.logging import get_logger
from review_activity_db.schemas.pr import PRRef

from .comments import CommentIngestionPipeline
from .progress import MessageCallback, MessageEmitter, WorkerEventType
from .results import CommentIngestionResult

logger = get_logger(__name__)

ClientFactory = Callable[[], GitHubClient]


@dataclass
class CommentJob:
    """Work item handed from reconciliation to the comment worker."""

    user_id: int
    """Local TrackedUser id (re-loaded in the worker's own session)."""

    username: str
    prs: list[PRRef] = field(default_factory=list)


class CommentWorkerManager:
    """Spawns and tracks comment ingestion tasks.

    Usage:
        workers = CommentWorkerManager(database_url=settings.database_url)
        workers.spawn(CommentJob(user.id, user.github_username, result.prs))
        ...
        await workers.wait_all()  # before a short-lived process exits
    """

    def __init__(
        self,
        database_url: str | None = None,
        *,
        client_factory: ClientFactory | None = None,
        on_message: MessageCallback | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            database_url: Connection string each task opens independently
            client_factory: Builds the GitHub client a task uses
            on_message: Receives WorkerMessage events from every task
        """
        self._database_url = database_url or get_settings().database_url
        self._client_factory = client_factory or GitHubClient
        self._on_message = on_message
        self._tasks: set[asyncio.Task[CommentIngestionResult]] = set()

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        return sum(1 for t in self._tasks if not t.done())

    def spawn(self, job: CommentJob) -> asyncio.Task[CommentIngestionResult]:
        """Start ingesting comments for ``job`` without waiting for it."""
        task = asyncio.create_task(self._run(job), name=f"comments:{job.username}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Spawned comment ingestion for {} ({} PRs)", job.username, len(job.prs))
        return task

    async def wait_all(self) -> list[CommentIngestionResult]:
        """Wait for every in-flight task and return their results."""
        tasks = list(self._tasks)
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    async def _run(self, job: CommentJob) -> CommentIngestionResult:
        emitter = MessageEmitter(job.username, self._on_message)
        engine = build_engine(self._database_url)
        try:
            session_factory = build_session_factory(engine)
            async with session_factory() as session:
                user_repository = TrackedUserRepository(session)
                user = await user_repository.get_by_id(job.user_id)
                if user is None:
                    raise UserNotFoundError(job.username)

                async with self._client_factory() as client:
                    pipeline = CommentIngestionPipeline(
                        client=client,
                        user_repository=user_repository,
                        comment_repository=CommentRepository(session),
                        on_message=self._on_message,
                    )
                    return await pipeline.run(user, job.prs)
        except Exception as e:
            logger.opt(exception=e).error("Comment ingestion for {} crashed", job.username)
            emitter.emit(WorkerEventType.ERROR, f"Comment ingestion failed: {e}")
            return CommentIngestionResult.from_error(job.username, e, prs_total=len(job.prs))
        finally:
            await engine.dispose()
