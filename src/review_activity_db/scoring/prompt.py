"""Prompt construction for review-feedback scoring."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

SCORE_CATEGORIES = (
    "code_quality",
    "logic_functionality",
    "performance_security",
    "testing_documentation",
)

CLASSIFICATION_CATEGORIES = (
    *SCORE_CATEGORIES,
    "repeated_comments",
    "comments_that_can_be_ignored",
)


class PromptComment(Protocol):
    type: object
    commenter: str | None
    body: str


def format_comments(comments: Iterable[PromptComment]) -> str:
    """Render comments as ``[type] commenter: body`` blocks."""
    lines = []
    for c in comments:
        kind = getattr(c.type, "value", c.type) or "general"
        lines.append(f"[{kind}] {c.commenter or 'unknown'}: {c.body or ''}")
    return "\n\n".join(lines)


def build_analysis_prompt(title: str, comments: list[PromptComment]) -> str:
    """Prompt asking for scores, per-category comment counts and reasoning as JSON."""
    return f"""You are a code review expert. \
Analyze the following pull request comments and provide:

1. Scores (0-10) for these categories:
   - Code Quality: code structure, naming, readability, maintainability
   - Logic/Functionality: correctness, business logic, edge cases
   - Performance/Security: optimizations, vulnerabilities, best practices
   - Testing/Documentation: test coverage, documentation quality

2. Classify each comment into ONE of these categories:
   - code_quality: structure, naming, style, readability
   - logic_functionality: business logic, functionality, bugs
   - performance_security: performance, security, optimizations
   - testing_documentation: tests, documentation, examples
   - repeated_comments: the same issue raised more than once
   - comments_that_can_be_ignored: typos, formatting only, off-topic, "+1", bare "LGTM"

Pull Request Title: {title}
Total Comments: {len(comments)}

Comments:
{format_comments(comments)}

Respond ONLY with a valid JSON object (no markdown, no code blocks):
{{
  "scores": {{
    "code_quality": <number 0-10>,
    "logic_functionality": <number 0-10>,
    "performance_security": <number 0-10>,
    "testing_documentation": <number 0-10>
  }},
  "comment_classification": {{
    "code_quality": <count>,
    "logic_functionality": <count>,
    "performance_security": <count>,
    "testing_documentation": <count>,
    "repeated_comments": <count>,
    "comments_that_can_be_ignored": <count>
  }},
  "reasoning": {{
    "code_quality": "<brief explanation>",
    "logic_functionality": "<brief explanation>",
    "performance_security": "<brief explanation>",
    "testing_documentation": "<brief explanation>"
  }}
}}"""


def build_custom_prompt(
    instructions: str,
    *,
    title: str,
    repository_url: str,
    state: str,
    comments: list[PromptComment],
) -> str:
    """Free-form prompt: caller instructions followed by the PR context."""
    return f"""{instructions}

Context:
Pull Request Title: {title}
Repository: {repository_url}
Total Comments: {len(comments)}
PR State: {state}

Comments:
{format_comments(comments)}"""
