"""
Bounded retry for fallible async provider calls.

Retries are immediate (no backoff). Cancellation is checked before every
attempt; when requested, the executor stops and reports a cancellation failure.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ragdesk.core.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

CANCELLED_MESSAGE = "Operation cancelled"


async def execute_with_retry(
    action: Callable[[], Awaitable[Result[T]]],
    max_retries: int,
    cancel_event: asyncio.Event | None = None,
) -> Result[T]:
    """
    Run action up to max_retries + 1 times. Returns the first success, or the
    last failure once attempts are exhausted.
    """
    result: Result[T] = Result.failure("Operation not executed")
    attempts = max(0, max_retries) + 1
    for attempt in range(1, attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("[retry] cancelled before attempt %d/%d", attempt, attempts)
            return Result.failure(CANCELLED_MESSAGE)
        result = await action()
        if result.is_success:
            return result
        logger.warning(
            "[retry] attempt %d/%d failed: %s", attempt, attempts, result.error_message
        )
    return result
