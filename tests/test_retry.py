"""
Unit tests for execute_with_retry().
"""

import asyncio

import pytest

from ragdesk.agent.retry import CANCELLED_MESSAGE, execute_with_retry
from ragdesk.core.result import Result


class _Flaky:
    """Fails `failures` times, then succeeds."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> Result[str]:
        self.calls += 1
        if self.calls <= self.failures:
            return Result.failure(f"boom {self.calls}")
        return Result.success("ok")


@pytest.mark.asyncio
async def test_first_success_returns_immediately() -> None:
    action = _Flaky(failures=0)
    result = await execute_with_retry(action, max_retries=2)
    assert result.is_success and result.value == "ok"
    assert action.calls == 1


@pytest.mark.asyncio
async def test_recovers_within_budget() -> None:
    action = _Flaky(failures=2)
    result = await execute_with_retry(action, max_retries=2)
    assert result.is_success
    assert action.calls == 3


@pytest.mark.asyncio
async def test_exhaustion_returns_last_failure() -> None:
    action = _Flaky(failures=10)
    result = await execute_with_retry(action, max_retries=2)
    assert not result.is_success
    assert result.error_message == "boom 3"
    assert action.calls == 3


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt() -> None:
    action = _Flaky(failures=10)
    result = await execute_with_retry(action, max_retries=0)
    assert not result.is_success
    assert action.calls == 1


@pytest.mark.asyncio
async def test_cancelled_before_first_attempt() -> None:
    action = _Flaky(failures=0)
    cancel = asyncio.Event()
    cancel.set()
    result = await execute_with_retry(action, max_retries=2, cancel_event=cancel)
    assert not result.is_success
    assert result.error_message == CANCELLED_MESSAGE
    assert action.calls == 0


@pytest.mark.asyncio
async def test_cancellation_between_attempts_stops_retrying() -> None:
    cancel = asyncio.Event()
    calls = 0

    async def action() -> Result[str]:
        nonlocal calls
        calls += 1
        cancel.set()
        return Result.failure("transient")

    result = await execute_with_retry(action, max_retries=5, cancel_event=cancel)
    assert result.error_message == CANCELLED_MESSAGE
    assert calls == 1
