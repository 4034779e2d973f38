"""Tests for comment ingestion."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.exc import SQLAlchemyError

from review_activity_db.db.models import CommentType
from review_activity_db.db.repositories import CommentRepository, TrackedUserRepository
from review_activity_db.github import GitHubClient, GitHubNotFoundError
from review_activity_db.schemas import GitHubComment, PRRef
from review_activity_db.sync import CommentIngestionPipeline, CommitManager, WorkerEventType
from tests.conftest import JAN_10_ISO, JAN_12_ISO
from tests.factories import make_github_comment, make_pull_request, make_user
from tests.fixtures.github_responses import (
    GITHUB_ISSUE_COMMENTS_RESPONSE,
    GITHUB_REVIEW_COMMENTS_RESPONSE,
)


def _comments(payloads) -> list[GitHubComment]:
    return [GitHubComment.model_validate(p) for p in payloads]


async def _user_with_prs(db_session, urls: list[str]):
    user = make_user(db_session)
    await db_session.flush()
    prs = [
        make_pull_request(db_session, user, github_id=2000 + i, number=i, repository_url=url)
        for i, url in enumerate(urls, start=1)
    ]
    await db_session.commit()
    return user, [PRRef.from_orm(pr) for pr in prs]


def _raw_response(body) -> MagicMock:
    response = MagicMock()
    response.json.return_value = body
    response.headers = {}
    return response


def _pipeline(db_session, client, **kwargs) -> CommentIngestionPipeline:
    return CommentIngestionPipeline(
        client=client,
        user_repository=TrackedUserRepository(db_session),
        comment_repository=CommentRepository(db_session),
        **kwargs,
    )


class TestCommentIngestion:
    """Tests for fetch, normalize and persist."""

    async def test_issue_and_review_comments_stored(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        mock_client.list_issue_comments.return_value = _comments(GITHUB_ISSUE_COMMENTS_RESPONSE)
        mock_client.list_review_comments.return_value = _comments(GITHUB_REVIEW_COMMENTS_RESPONSE)

        result = await _pipeline(db_session, mock_client).run(user, prs)

        assert result.success
        assert result.issue_comments == 2
        assert result.review_comments == 1
        assert result.prs_processed == 1
        assert result.errors == []
        mock_client.list_issue_comments.assert_awaited_once_with("octo", "repo", 1)

        stored = await CommentRepository(db_session).list_for_pull_request(prs[0].id)
        assert sorted(c.type for c in stored) == [
            CommentType.ISSUE,
            CommentType.ISSUE,
            CommentType.REVIEW,
        ]
        assert {c.commenter_id for c in stored} == {9001, 9002}

    async def test_watermark_set_after_success(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])

        result = await _pipeline(db_session, mock_client).run(user, prs)

        assert result.synced_at is not None
        assert user.last_comment_sync == result.synced_at

    async def test_rerun_does_not_duplicate(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        mock_client.list_issue_comments.return_value = _comments(GITHUB_ISSUE_COMMENTS_RESPONSE)
        pipeline = _pipeline(db_session, mock_client)

        await pipeline.run(user, prs)
        await pipeline.run(user, prs)

        assert await CommentRepository(db_session).count() == 2

    async def test_unknown_host_skipped(self, db_session, mock_client):
        """A PR on another host is recorded as a parse error and skipped."""
        user, prs = await _user_with_prs(
            db_session,
            [
                "https://gitlab.example.com/octo/repo/pull/1",
                "https://github.com/octo/repo/pull/2",
            ],
        )
        mock_client.list_issue_comments.return_value = _comments([make_github_comment()])

        result = await _pipeline(db_session, mock_client).run(user, prs)

        assert result.success
        assert result.prs_processed == 1
        assert len(result.errors) == 1
        assert result.errors[0].stage == "parse"
        assert result.errors[0].pr_github_id == prs[0].github_id
        assert mock_client.list_issue_comments.await_count == 1

    async def test_fetch_error_continues(self, db_session, mock_client):
        """An API failure on one PR does not stop the others."""
        user, prs = await _user_with_prs(
            db_session,
            [
                "https://github.com/octo/repo/pull/1",
                "https://github.com/octo/repo/pull/2",
            ],
        )
        mock_client.list_issue_comments.side_effect = [
            GitHubNotFoundError("gone", status_code=404),
            _comments([make_github_comment(created_at=JAN_12_ISO)]),
        ]

        result = await _pipeline(db_session, mock_client).run(user, prs)

        assert result.success
        assert result.prs_processed == 1
        assert result.issue_comments == 1
        assert [e.stage for e in result.errors] == ["fetch"]
        assert result.errors[0].error_type == "GitHubNotFoundError"
        assert user.last_comment_sync is not None

    async def test_unparsable_response_isolated_to_its_pr(self, db_session):
        """A non-JSON page for one PR is a per-PR error; later PRs still ingest."""
        user, prs = await _user_with_prs(
            db_session,
            [
                "https://github.com/octo/repo/pull/1",
                "https://github.com/octo/repo/pull/2",
            ],
        )
        html_page = _raw_response(None)
        html_page.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

        with patch("review_activity_db.github.client.GitHub") as mock_class:
            rest = mock_class.return_value.rest
            rest.issues.async_list_comments = AsyncMock(
                side_effect=[html_page, _raw_response([make_github_comment()])]
            )
            rest.pulls.async_list_review_comments = AsyncMock(return_value=_raw_response([]))
            result = await _pipeline(db_session, GitHubClient()).run(user, prs)

        assert result.success
        assert result.issue_comments == 1
        assert result.prs_processed == 1
        assert [(e.pr_github_id, e.stage) for e in result.errors] == [(prs[0].github_id, "fetch")]
        assert result.errors[0].error_type == "GitHubClientError"
        assert user.last_comment_sync is not None

    async def test_persistence_failure_keeps_watermark(self, db_session, mock_client):
        """A database error aborts the run before the watermark moves."""
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        mock_client.list_issue_comments.return_value = _comments([make_github_comment()])
        comment_repository = CommentRepository(db_session)
        comment_repository.upsert_many = AsyncMock(side_effect=SQLAlchemyError("locked"))
        pipeline = CommentIngestionPipeline(
            client=mock_client,
            user_repository=TrackedUserRepository(db_session),
            comment_repository=comment_repository,
        )

        result = await pipeline.run(user, prs)

        assert not result.success
        assert isinstance(result.fatal_error, SQLAlchemyError)
        assert result.to_dict()["error_type"] == "SQLAlchemyError"
        await db_session.refresh(user)
        assert user.last_comment_sync is None

    async def test_small_batches_commit(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        mock_client.list_issue_comments.return_value = _comments(
            [make_github_comment(i, body=f"c{i}", created_at=JAN_10_ISO) for i in range(5)]
        )

        result = await _pipeline(db_session, mock_client, batch_size=2).run(user, prs)

        assert result.issue_comments == 5
        assert await CommentRepository(db_session).count() == 5

    async def test_messages_emitted(self, db_session, mock_client):
        user, prs = await _user_with_prs(
            db_session,
            [
                "https://gitlab.example.com/octo/repo/pull/1",
                "https://github.com/octo/repo/pull/2",
            ],
        )
        on_message = MagicMock()

        await _pipeline(db_session, mock_client, on_message=on_message).run(user, prs)

        types = [call.args[0].type for call in on_message.call_args_list]
        assert types[0] == WorkerEventType.PROGRESS
        assert WorkerEventType.WARNING in types
        assert types[-1] == WorkerEventType.SUCCESS

    async def test_failing_callback_ignored(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        on_message = MagicMock(side_effect=RuntimeError("ui closed"))

        result = await _pipeline(db_session, mock_client, on_message=on_message).run(user, prs)

        assert result.success

    async def test_progress_updates(self, db_session, mock_client):
        user, prs = await _user_with_prs(db_session, ["https://github.com/octo/repo/pull/1"])
        updates = []

        await _pipeline(db_session, mock_client, on_progress=updates.append).run(user, prs)

        assert updates[-1].completed == 1
        assert updates[-1].progress_percent == 100.0


class TestCommitManager:
    """Tests for batched commits."""

    async def test_commits_when_batch_fills(self):
        session = AsyncMock()
        commits = CommitManager(session, batch_size=3)

        assert await commits.record(2) == 0
        session.commit.assert_not_awaited()
        assert await commits.record(2) == 4

        session.commit.assert_awaited_once()
        assert commits.pending == 0
        assert commits.committed == 4

    async def test_finalize_flushes_partial_batch(self):
        session = AsyncMock()
        commits = CommitManager(session, batch_size=100)
        await commits.record(5)

        assert await commits.finalize() == 5
        assert await commits.finalize() == 0
        session.commit.assert_awaited_once()

    async def test_commit_holds_write_lock(self):
        lock = asyncio.Lock()
        held = []
        session = AsyncMock()
        session.commit.side_effect = lambda: held.append(lock.locked())
        commits = CommitManager(session, lock, batch_size=1)

        await commits.record()

        assert held == [True]
        assert not lock.locked()
