"""Tests for the repository layer against an in-memory database."""

from datetime import UTC, datetime

from review_activity_db.db.models import CommentType, PRState
from review_activity_db.db.repositories import (
    CommentRepository,
    PullRequestRepository,
    TeamRepository,
    TrackedUserRepository,
)
from review_activity_db.schemas import GitHubComment, GitHubSearchItem
from tests.conftest import APR_15, JAN_10, JAN_15, MAR_01
from tests.factories import (
    make_github_comment,
    make_membership,
    make_pull_request,
    make_search_item,
    make_search_items,
    make_team,
    make_user,
    pull_request_fields,
)


def _upserts(items, user_github_id=583231):
    return [item.to_pr_upsert(user_github_id) for item in items]


class TestPullRequestRepositoryUpsert:
    """Tests for PR upserts keyed by remote id."""

    async def test_insert_new_rows(self, db_session):
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)

        prs = await repo.upsert_many(_upserts(make_search_items([2001, 2002])))

        assert [pr.github_id for pr in prs] == [2001, 2002]
        assert all(pr.id is not None for pr in prs)
        assert await repo.count() == 2

    async def test_upsert_is_idempotent(self, db_session):
        """Running the same batch twice leaves the same rows with the same values."""
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)
        records = _upserts(make_search_items(range(3001, 3011)))

        first = [pull_request_fields(pr) for pr in await repo.upsert_many(records)]
        second = [pull_request_fields(pr) for pr in await repo.upsert_many(records)]

        assert await repo.count() == 10
        assert second == first

    async def test_upsert_overwrites_synced_fields(self, db_session):
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)
        await repo.upsert_many(_upserts(make_search_items([2001], title="Draft")))

        updated = GitHubSearchItem.model_validate(
            make_search_item(
                2001,
                title="Final",
                state="closed",
                closed_at="2025-01-20T10:00:00Z",
                merged_at="2025-01-20T10:00:00Z",
                comments=4,
            )
        )
        [pr] = await repo.upsert_many(_upserts([updated]))

        assert pr.title == "Final"
        assert pr.state == PRState.CLOSED
        assert pr.is_merged
        assert pr.total_comments == 4

    async def test_upsert_preserves_scores(self, db_session):
        """Re-syncing a PR never resets its subscores."""
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)
        await repo.upsert_many(_upserts(make_search_items([2001])))
        await repo.update_scores(2001, {"code_quality": 7.5, "ui_ux": 3})

        [pr] = await repo.upsert_many(_upserts(make_search_items([2001], title="Retitled")))

        assert pr.title == "Retitled"
        assert pr.code_quality == 7.5
        assert pr.ui_ux == 3.0

    async def test_returns_input_order(self, db_session):
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)

        prs = await repo.upsert_many(_upserts(make_search_items([2003, 2001, 2002])))

        assert [pr.github_id for pr in prs] == [2003, 2001, 2002]

    async def test_duplicates_in_batch_collapse(self, db_session):
        """The same PR from both searches is stored once; the later copy wins."""
        make_user(db_session)
        await db_session.flush()
        repo = PullRequestRepository(db_session)
        records = _upserts(
            make_search_items([2001], title="From created search")
            + make_search_items([2001], title="From open search")
        )

        prs = await repo.upsert_many(records)

        assert len(prs) == 1
        assert prs[0].title == "From open search"
        assert await repo.count() == 1

    async def test_empty_batch(self, db_session):
        assert await PullRequestRepository(db_session).upsert_many([]) == []


class TestPullRequestRepositoryQueries:
    async def test_get_by_github_ids_keeps_order(self, db_session):
        user = make_user(db_session)
        await db_session.flush()
        make_pull_request(db_session, user, github_id=1, number=1)
        make_pull_request(db_session, user, github_id=2, number=2)
        await db_session.flush()

        prs = await PullRequestRepository(db_session).get_by_github_ids([2, 99, 1])

        assert [pr.github_id for pr in prs] == [2, 1]

    async def test_list_for_user_bounds(self, db_session):
        """Creation-time bounds are inclusive; results are newest first."""
        user = make_user(db_session)
        other = make_user(db_session, github_username="someone", github_id=1234)
        await db_session.flush()
        make_pull_request(db_session, user, github_id=1, number=1, created_at=JAN_10)
        make_pull_request(db_session, user, github_id=2, number=2, created_at=MAR_01)
        make_pull_request(db_session, user, github_id=3, number=3, created_at=APR_15)
        make_pull_request(db_session, other, github_id=4, number=4, created_at=MAR_01)
        await db_session.flush()
        repo = PullRequestRepository(db_session)

        everything = await repo.list_for_user(user.github_id)
        bounded = await repo.list_for_user(user.github_id, start=JAN_15, end=MAR_01)

        assert [pr.github_id for pr in everything] == [3, 2, 1]
        assert [pr.github_id for pr in bounded] == [2]

    async def test_update_scores_ignores_unknown_keys(self, db_session):
        user = make_user(db_session)
        await db_session.flush()
        make_pull_request(db_session, user, github_id=1)
        await db_session.flush()
        repo = PullRequestRepository(db_session)

        pr = await repo.update_scores(1, {"testing_documentation": 9, "vibes": 10})

        assert pr is not None
        assert pr.testing_documentation == 9.0

    async def test_update_scores_missing_pr(self, db_session):
        assert await PullRequestRepository(db_session).update_scores(404, {"ui_ux": 1}) is None


class TestCommentRepository:
    """Tests for comment upserts keyed by identity."""

    async def _pr(self, db_session):
        user = make_user(db_session)
        await db_session.flush()
        pr = make_pull_request(db_session, user)
        await db_session.flush()
        return pr

    async def test_upsert_dedupes_by_identity(self, db_session):
        """Ingesting the same comments twice keeps one row each."""
        pr = await self._pr(db_session)
        repo = CommentRepository(db_session)
        comments = [
            GitHubComment.model_validate(make_github_comment(i, body=f"comment {i}"))
            .to_comment_upsert(CommentType.ISSUE, pr.id, pr.github_id)
            for i in (1, 2, 3)
        ]

        assert await repo.upsert_many(comments) == 3
        assert await repo.upsert_many(comments) == 3
        assert await repo.count() == 3

    async def test_duplicate_within_batch(self, db_session):
        pr = await self._pr(db_session)
        repo = CommentRepository(db_session)
        payload = GitHubComment.model_validate(make_github_comment())
        comments = [
            payload.to_comment_upsert(CommentType.ISSUE, pr.id, pr.github_id),
            payload.to_comment_upsert(CommentType.REVIEW, pr.id, pr.github_id),
        ]

        assert await repo.upsert_many(comments) == 1
        [stored] = await repo.list_for_pull_request(pr.id)
        assert stored.type == CommentType.REVIEW

    async def test_repeated_text_in_one_review_kept(self, db_session):
        """Identical comments posted together in one review are separate rows."""
        pr = await self._pr(db_session)
        repo = CommentRepository(db_session)
        comments = [
            GitHubComment.model_validate(make_github_comment(i, body="Missing docstring."))
            .to_comment_upsert(CommentType.REVIEW, pr.id, pr.github_id)
            for i in (8001, 8002)
        ]

        assert await repo.upsert_many(comments) == 2
        assert await repo.upsert_many(comments) == 2
        assert await repo.count() == 2

    async def test_batches_split(self, db_session):
        """Large inputs are written across several statements."""
        pr = await self._pr(db_session)
        repo = CommentRepository(db_session, batch_size=2)
        comments = [
            GitHubComment.model_validate(make_github_comment(i, body=f"c{i}"))
            .to_comment_upsert(CommentType.ISSUE, pr.id, pr.github_id)
            for i in range(5)
        ]

        assert await repo.upsert_many(comments) == 5
        assert await repo.count() == 5

    async def test_list_for_pull_requests_empty(self, db_session):
        assert await CommentRepository(db_session).list_for_pull_requests([]) == []


class TestTrackedUserRepository:
    async def test_create_then_update(self, db_session):
        repo = TrackedUserRepository(db_session)

        user, created = await repo.create_or_update("octocat", github_id=583231)
        again, created_again = await repo.create_or_update("OctoCat", display_name="Mona")

        assert created
        assert not created_again
        assert again.id == user.id
        assert again.github_id == 583231
        assert again.display_name == "Mona"

    async def test_lookup_is_case_insensitive(self, db_session):
        make_user(db_session, github_username="OctoCat")
        await db_session.flush()

        user = await TrackedUserRepository(db_session).get_by_username("  octocat ")

        assert user is not None
        assert user.github_username == "OctoCat"

    async def test_watermarks(self, db_session):
        user = make_user(db_session)
        await db_session.flush()
        repo = TrackedUserRepository(db_session)
        stamp = datetime(2025, 5, 1, tzinfo=UTC)

        assert await repo.mark_pr_synced(user, stamp) == stamp
        assert await repo.mark_comments_synced(user) >= stamp
        assert user.last_pr_sync == stamp

    async def test_get_github_ids(self, db_session):
        make_user(db_session, github_username="a", github_id=1)
        make_user(db_session, github_username="b", github_id=None)
        await db_session.flush()

        assert await TrackedUserRepository(db_session).get_github_ids() == {1}


class TestTeamRepository:
    async def test_members_in_assignment_order(self, db_session):
        team = make_team(db_session)
        first = make_user(db_session, github_username="first", github_id=1)
        second = make_user(db_session, github_username="second", github_id=2)
        await db_session.flush()
        make_membership(db_session, team, second, assigned_at=datetime(2025, 1, 1))
        make_membership(db_session, team, first, assigned_at=datetime(2025, 2, 1))
        await db_session.flush()

        members = await TeamRepository(db_session).get_members(team.id)

        assert [m.github_username for m in members] == ["second", "first"]

    async def test_add_member_is_idempotent(self, db_session):
        repo = TeamRepository(db_session)
        team = await repo.create("platform", "Core platform")
        user = make_user(db_session)
        await db_session.flush()

        membership, created = await repo.add_member(team, user, assigned_by="lead")
        again, created_again = await repo.add_member(team, user)

        assert created
        assert not created_again
        assert again.id == membership.id
        assert await repo.get_member_github_ids(team.id) == {583231}
