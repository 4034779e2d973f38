"""Tests for the background comment worker."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from review_activity_db.db.engine import build_session_factory
from review_activity_db.db.repositories import CommentRepository, TrackedUserRepository
from review_activity_db.exceptions import UserNotFoundError
from review_activity_db.schemas import GitHubComment, PRRef
from review_activity_db.sync import CommentJob, CommentWorkerManager, WorkerEventType
from tests.factories import make_github_comment, make_pull_request, make_user


@pytest.fixture
async def file_session(file_db_url):
    """Session on the shared file database, separate from the worker's."""
    engine = create_async_engine(file_db_url)
    async with build_session_factory(engine)() as session:
        yield session
    await engine.dispose()


async def _seed(session) -> tuple[int, list[PRRef]]:
    user = make_user(session)
    await session.flush()
    pr = make_pull_request(session, user, number=7)
    await session.commit()
    return user.id, [PRRef.from_orm(pr)]


class TestCommentWorkerManager:
    async def test_spawn_and_wait(self, file_db_url, file_session, mock_client):
        """A spawned job runs on its own engine and advances the watermark."""
        user_id, prs = await _seed(file_session)
        mock_client.list_issue_comments.return_value = [
            GitHubComment.model_validate(make_github_comment())
        ]
        workers = CommentWorkerManager(file_db_url, client_factory=lambda: mock_client)

        workers.spawn(CommentJob(user_id, "octocat", prs))
        [result] = await workers.wait_all()

        assert result.success
        assert result.issue_comments == 1
        assert workers.pending == 0

        user = await TrackedUserRepository(file_session).get_by_id(user_id)
        await file_session.refresh(user)
        assert user.last_comment_sync is not None
        assert await CommentRepository(file_session).count() == 1

    async def test_wait_all_without_tasks(self, file_db_url):
        assert await CommentWorkerManager(file_db_url).wait_all() == []

    async def test_unknown_user_reported_not_raised(self, file_db_url, mock_client):
        """A crashed task turns into a failed result and an ERROR message."""
        on_message = MagicMock()
        workers = CommentWorkerManager(
            file_db_url, client_factory=lambda: mock_client, on_message=on_message
        )

        workers.spawn(CommentJob(999, "ghost", []))
        [result] = await workers.wait_all()

        assert not result.success
        assert isinstance(result.fatal_error, UserNotFoundError)
        message = on_message.call_args.args[0]
        assert message.type == WorkerEventType.ERROR
        assert message.username == "ghost"

    async def test_client_failure_reported(self, file_db_url, file_session):
        user_id, prs = await _seed(file_session)

        def broken_factory():
            raise RuntimeError("no token")

        workers = CommentWorkerManager(file_db_url, client_factory=broken_factory)
        workers.spawn(CommentJob(user_id, "octocat", prs))
        [result] = await workers.wait_all()

        assert not result.success
        assert result.prs_total == 1
        assert "no token" in result.to_dict()["error"]
