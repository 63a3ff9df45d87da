"""Tests for the retrying content client."""

from __future__ import annotations

import threading

import pytest

from tests._fixtures.fakes import ScriptedRunner
from tooldocgen.config import RetryConfig
from tooldocgen.errors import GenerationCancelled, GenerationError, TruncationError
from tooldocgen.llm.client import RetryingContentClient, is_rate_limited
from tooldocgen.llm.runner import Completion

RATE_LIMITED = RuntimeError("LLM HTTP runner failed with status 429: Too Many Requests")


def _client(runner: ScriptedRunner, sleeps: list[float], **kwargs: object) -> RetryingContentClient:
    return RetryingContentClient(runner, sleep=sleeps.append, **kwargs)  # type: ignore[arg-type]


def test_complete_returns_text_and_forwards_budget() -> None:
    runner = ScriptedRunner(["generated"])
    sleeps: list[float] = []

    result = _client(runner, sleeps).complete("system", "user", 1234)

    assert result == "generated"
    assert runner.calls == [{"prompt": "user", "system": "system", "max_tokens": 1234}]
    assert sleeps == []


def test_length_limited_completion_fails_without_retry() -> None:
    runner = ScriptedRunner([Completion(text="half a pa", finish_reason="length")])
    sleeps: list[float] = []

    with pytest.raises(TruncationError) as excinfo:
        _client(runner, sleeps).complete("system", "user", 50)

    assert excinfo.value.max_output_tokens == 50
    assert excinfo.value.partial == "half a pa"
    assert len(runner.calls) == 1
    assert sleeps == []


def test_rate_limit_is_retried_with_backoff() -> None:
    runner = ScriptedRunner([RATE_LIMITED, RATE_LIMITED, "finally"])
    sleeps: list[float] = []

    result = _client(runner, sleeps).complete("system", "user", 10)

    assert result == "finally"
    assert len(runner.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_rate_limit_exhaustion_raises_generation_error() -> None:
    runner = ScriptedRunner([RATE_LIMITED])
    sleeps: list[float] = []

    with pytest.raises(GenerationError, match="after 5 attempts"):
        _client(runner, sleeps).complete("system", "user", 10)

    assert len(runner.calls) == 5
    assert sleeps == [1.0, 2.0, 4.0, 8.0]


def test_non_rate_limit_error_is_not_retried() -> None:
    runner = ScriptedRunner([RuntimeError("LLM HTTP runner failed with status 500: boom")])
    sleeps: list[float] = []

    with pytest.raises(GenerationError, match="boom") as excinfo:
        _client(runner, sleeps).complete("system", "user", 10)

    assert not isinstance(excinfo.value, TruncationError)
    assert len(runner.calls) == 1
    assert sleeps == []


def test_cancelled_before_first_attempt() -> None:
    runner = ScriptedRunner(["unused"])
    event = threading.Event()
    event.set()

    with pytest.raises(GenerationCancelled):
        _client(runner, [], cancel_event=event).complete("system", "user", 10)

    assert runner.calls == []


def test_cancellation_is_checked_between_attempts() -> None:
    runner = ScriptedRunner([RATE_LIMITED, "never reached"])
    event = threading.Event()

    def sleep_then_cancel(seconds: float) -> None:
        event.set()

    client = RetryingContentClient(runner, sleep=sleep_then_cancel, cancel_event=event)

    with pytest.raises(GenerationCancelled):
        client.complete("system", "user", 10)

    assert len(runner.calls) == 1


def test_from_config_applies_retry_settings() -> None:
    runner = ScriptedRunner([RATE_LIMITED])
    sleeps: list[float] = []
    client = RetryingContentClient.from_config(
        runner,  # type: ignore[arg-type]
        RetryConfig(max_attempts=3, initial_delay=0.5),
        sleep=sleeps.append,
    )

    with pytest.raises(GenerationError):
        client.complete("system", "user", 10)

    assert sleeps == [0.5, 1.0]


def test_invalid_attempt_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        RetryingContentClient(ScriptedRunner(), max_attempts=0)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "message",
    [
        "status 429: slow down",
        "Rate limit reached for requests",
        "RateLimitError",
        "Too Many Requests",
        "Insufficient quota for deployment",
    ],
)
def test_rate_limit_detection(message: str) -> None:
    assert is_rate_limited(RuntimeError(message))


def test_other_errors_are_not_rate_limits() -> None:
    assert not is_rate_limited(RuntimeError("status 500: internal error"))
    assert not is_rate_limited(RuntimeError("connection reset after 4290 bytes"))
