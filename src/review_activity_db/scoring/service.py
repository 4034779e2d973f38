"""Review-feedback scoring for stored pull requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from review_activity_db.db.repositories import CommentRepository, PullRequestRepository
from review_activity_db.exceptions import PullRequestNotFoundError
from review_activity_db.logging import get_logger

from .parser import PRAnalysis, parse_analysis
from .prompt import build_analysis_prompt, build_custom_prompt

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from review_activity_db.db.models import Comment, PullRequest

    from .oracle import ScoringOracle

logger = get_logger(__name__)


class PRScoringService:
    """Scores a PR's review feedback with an external oracle.

    Usage:
        async with get_session() as session:
            service = PRScoringService(session, ChatCompletionsOracle())
            analysis = await service.analyze(pr_github_id)
    """

    def __init__(self, session: AsyncSession, oracle: ScoringOracle) -> None:
        self._session = session
        self._oracle = oracle
        self._prs = PullRequestRepository(session)
        self._comments = CommentRepository(session)

    async def _load(self, pr_github_id: int) -> tuple[PullRequest, list[Comment]]:
        pr = await self._prs.get_by_github_id(pr_github_id)
        if pr is None:
            raise PullRequestNotFoundError(pr_github_id)
        return pr, await self._comments.list_for_pull_request(pr.id)

    async def analyze(self, pr_github_id: int) -> PRAnalysis:
        """Score a PR's comments and store the category scores.

        A PR without comments gets an all-zero analysis and the oracle
        is not called.

        Args:
            pr_github_id: Remote PR id

        Returns:
            Validated analysis

        Raises:
            PullRequestNotFoundError: If the PR is not stored
            ScoringOracleError: If the oracle could not be reached
        """
        pr, comments = await self._load(pr_github_id)
        if not comments:
            logger.info("PR {} has no comments; skipping oracle", pr_github_id)
            analysis = PRAnalysis()
        else:
            raw = await self._oracle.complete(build_analysis_prompt(pr.title, comments))
            analysis = parse_analysis(raw)
            if analysis.parse_error:
                logger.warning("PR {}: {}", pr_github_id, analysis.parse_error)

        await self._prs.update_scores(pr_github_id, analysis.scores)
        await self._session.commit()
        logger.info(
            "Scored PR {} ({} comments): overall {}",
            pr_github_id,
            len(comments),
            analysis.overall_score,
        )
        return analysis

    async def analyze_custom(self, pr_github_id: int, instructions: str) -> str:
        """Run free-form instructions against a PR's comments.

        Nothing is stored.

        Raises:
            PullRequestNotFoundError: If the PR is not stored
            ScoringOracleError: If the oracle could not be reached
        """
        pr, comments = await self._load(pr_github_id)
        prompt = build_custom_prompt(
            instructions,
            title=pr.title,
            repository_url=pr.repository_url,
            state=pr.state.value,
            comments=comments,
        )
        return await self._oracle.complete(prompt)
