"""Retrying wrapper around the text-generation backend."""

from __future__ import annotations

import re
import threading
import time
from typing import Callable, Optional

from ..config import RetryConfig
from ..errors import GenerationCancelled, GenerationError, TruncationError
from ..logging import get_logger
from .runner import LLMRunner

_RATE_LIMIT_PATTERN = re.compile(
    r"\b429\b|rate[\s_-]?limit|too many requests|quota", re.IGNORECASE
)


def is_rate_limited(exc: BaseException) -> bool:
    """Return True when the error message looks like a throttling response."""
    return bool(_RATE_LIMIT_PATTERN.search(str(exc)))


class RetryingContentClient:
    """Calls the backend with exponential backoff on rate limits.

    Only rate-limit failures are retried. A completion that stopped on the
    output token limit raises :class:`TruncationError` immediately, and any
    other failure is wrapped in :class:`GenerationError` without retrying.
    """

    def __init__(
        self,
        runner: LLMRunner,
        *,
        max_attempts: int = 5,
        initial_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.runner = runner
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self._sleep = sleep
        self.cancel_event = cancel_event
        self.logger = get_logger("llm.client")

    @classmethod
    def from_config(
        cls,
        runner: LLMRunner,
        retry: RetryConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> "RetryingContentClient":
        return cls(
            runner,
            max_attempts=retry.max_attempts,
            initial_delay=retry.initial_delay,
            sleep=sleep,
            cancel_event=cancel_event,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return self.initial_delay * (2 ** (attempt - 1))

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int,
    ) -> str:
        """Return generated text or raise :class:`GenerationError`."""
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_attempts + 1):
            self._check_cancelled()
            try:
                completion = self.runner.run(
                    user_prompt, system=system_prompt, max_tokens=max_output_tokens
                )
            except Exception as exc:
                if not is_rate_limited(exc):
                    raise GenerationError(f"Generation failed: {exc}") from exc
                last_error = exc
                if attempt == self.max_attempts:
                    break
                wait = self.delay_for(attempt)
                self.logger.warning(
                    "Rate limited (attempt %d/%d); retrying in %.1fs",
                    attempt,
                    self.max_attempts,
                    wait,
                )
                self._sleep(wait)
                continue

            if completion.truncated:
                raise TruncationError(
                    f"Output truncated at the {max_output_tokens}-token limit",
                    max_output_tokens=max_output_tokens,
                    partial=completion.text,
                )
            return completion.text

        self.logger.error("All %d attempts were rate limited", self.max_attempts)
        raise GenerationError(
            f"Generation failed after {self.max_attempts} attempts: {last_error}"
        ) from last_error

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled before the next attempt")


__all__ = ["RetryingContentClient", "is_rate_limited"]
