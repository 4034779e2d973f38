"""Review-feedback scoring."""

from .oracle import ChatCompletionsOracle, ScoringOracle
from .parser import PRAnalysis, clamp_score, parse_analysis, strip_fences
from .prompt import CLASSIFICATION_CATEGORIES, SCORE_CATEGORIES
from .service import PRScoringService

__all__ = [
    "CLASSIFICATION_CATEGORIES",
    "SCORE_CATEGORIES",
    "ChatCompletionsOracle",
    "PRAnalysis",
    "PRScoringService",
    "ScoringOracle",
    "clamp_score",
    "parse_analysis",
    "strip_fences",
]
