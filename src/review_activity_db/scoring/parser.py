"""Parsing and validation of scoring oracle output.

The oracle is untrusted: the text may be wrapped in markdown fences,
scores may be out of range or missing, and the JSON may be malformed.
Parsing never raises; the worst case is an all-zero analysis.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from pydantic import BaseModel, Field, computed_field

from review_activity_db.logging import get_logger

from .prompt import CLASSIFICATION_CATEGORIES, SCORE_CATEGORIES

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)

MIN_SCORE = 0.0
MAX_SCORE = 10.0


class PRAnalysis(BaseModel):
    """Validated analysis of one PR's review comments."""

    scores: dict[str, float] = Field(
        default_factory=lambda: dict.fromkeys(SCORE_CATEGORIES, 0.0)
    )
    comment_classification: dict[str, int] = Field(
        default_factory=lambda: dict.fromkeys(CLASSIFICATION_CATEGORIES, 0)
    )
    reasoning: dict[str, str] = Field(default_factory=dict)
    parse_error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_score(self) -> float:
        """Mean of the four category scores."""
        values = [self.scores.get(c, 0.0) for c in SCORE_CATEGORIES]
        return round(sum(values) / len(values), 2)


def clamp_score(value: Any) -> float:
    """Coerce to a float in [0, 10]; anything non-numeric becomes 0."""
    if isinstance(value, bool):
        return MIN_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_SCORE
    if math.isnan(number):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, number))


def _count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def strip_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _FENCE_RE.sub("", raw.strip())


def parse_analysis(raw: str | None) -> PRAnalysis:
    """Turn oracle text into a :class:`PRAnalysis`.

    Args:
        raw: Oracle response text

    Returns:
        Analysis with clamped scores; all zeros with ``parse_error`` set
        when the text is not a JSON object
    """
    if not raw:
        return PRAnalysis(parse_error="empty response")

    try:
        data = json.loads(strip_fences(raw))
    except json.JSONDecodeError as e:
        logger.warning("Could not parse scoring response as JSON: {}", e)
        return PRAnalysis(parse_error=f"invalid JSON: {e}")
    if not isinstance(data, dict):
        return PRAnalysis(parse_error="response is not a JSON object")

    raw_scores = data.get("scores")
    raw_scores = raw_scores if isinstance(raw_scores, dict) else {}
    raw_classification = data.get("comment_classification")
    raw_classification = raw_classification if isinstance(raw_classification, dict) else {}
    raw_reasoning = data.get("reasoning")
    raw_reasoning = raw_reasoning if isinstance(raw_reasoning, dict) else {}

    return PRAnalysis(
        scores={c: clamp_score(raw_scores.get(c)) for c in SCORE_CATEGORIES},
        comment_classification={
            c: _count(raw_classification.get(c)) for c in CLASSIFICATION_CATEGORIES
        },
        reasoning={str(k): str(v) for k, v in raw_reasoning.items()},
    )
