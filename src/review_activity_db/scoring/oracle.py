"""Scoring oracle clients.

The scoring service only needs ``complete(prompt) -> str``. The shipped
implementation talks to any OpenAI-compatible ``/chat/completions``
endpoint over httpx.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import httpx

from review_activity_db.config import ScoringConfig, get_settings
from review_activity_db.exceptions import ScoringOracleError
from review_activity_db.logging import get_logger

logger = get_logger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class ScoringOracle(Protocol):
    """Anything that turns a prompt into response text."""

    async def complete(self, prompt: str) -> str: ...


class ChatCompletionsOracle:
    """OpenAI-compatible chat completions client.

    Transport errors and 429/5xx responses are retried with exponential
    backoff (1s, 2s, 4s, ...) up to ``max_retries`` times.

    Usage:
        oracle = ChatCompletionsOracle()
        text = await oracle.complete(prompt)
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff_base: float = 1.0,
    ) -> None:
        """Initialize the oracle.

        Args:
            config: Scoring configuration (uses settings if not provided)
            transport: Optional httpx transport (tests pass a MockTransport)
            backoff_base: Seconds before the first retry
        """
        self._config = config or get_settings().scoring
        self._transport = transport
        self._backoff_base = backoff_base

    async def complete(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the reply text.

        Raises:
            ScoringOracleError: If every attempt failed or the reply is malformed
        """
        cfg = self._config
        payload = {
            "model": cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": cfg.temperature,
        }
        headers = {"Authorization": f"Bearer {cfg.api_key}"} if cfg.api_key else {}
        url = f"{cfg.api_url.rstrip('/')}/chat/completions"

        attempts = cfg.max_retries + 1
        reason = ""
        async with httpx.AsyncClient(
            timeout=cfg.timeout_seconds,
            transport=self._transport,
        ) as client:
            for attempt in range(attempts):
                try:
                    response = await client.post(url, json=payload, headers=headers)
                except httpx.HTTPError as e:
                    reason = f"unreachable: {e}"
                else:
                    if response.status_code in _RETRYABLE_STATUS:
                        reason = f"status {response.status_code}"
                    elif response.is_error:
                        raise ScoringOracleError(f"Scoring API returned {response.status_code}")
                    else:
                        return self._extract_content(response)

                if attempt < attempts - 1:
                    await self._backoff(attempt, attempts, reason)

        raise ScoringOracleError(f"Scoring API failed after {attempts} attempts ({reason})")

    async def _backoff(self, attempt: int, attempts: int, reason: str) -> None:
        delay = self._backoff_base * 2**attempt
        logger.warning(
            "Scoring API error (attempt {}/{}): {}. Retrying in {:.1f}s",
            attempt + 1,
            attempts,
            reason,
            delay,
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _extract_content(response: httpx.Response) -> str:
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ScoringOracleError("Unexpected scoring API response shape") from e
        return str(content or "").strip()
