"""Retry engine and timeout wrapper for remote calls.

Usage:
    result = await retry_with_backoff(
        lambda: with_timeout(service.generate_text(request), 30_000, "persona"),
        operation="persona",
        max_attempts=3,
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..constants import limits
from .errors import GenerationError, GenerationTimeoutError, classify_error

_logger = logging.getLogger("ai_calls")

T = TypeVar("T")

# Type for attempt progress callback
AttemptCallback = Callable[[dict[str, Any]], Awaitable[None]] | None


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, GenerationError) and error.retryable


async def with_timeout(awaitable: Awaitable[T], timeout_ms: int, operation: str) -> T:
    """Race an awaitable against a deadline.

    The losing call is cancelled. Clients that cannot honour cancellation may
    still finish in the background, so callers must not let a late result
    write shared state (see ``CheckpointedPipeline`` epochs).

    Raises:
        GenerationTimeoutError: The deadline passed first.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        _logger.warning(f"OP:{operation} | TIMEOUT | after:{timeout_ms}ms")
        raise GenerationTimeoutError(operation, timeout_ms, e) from e


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    name: str,
    max_attempts: int = limits.TEXT_RETRIES,
    initial_delay_ms: int = limits.INITIAL_RETRY_DELAY_MS,
    multiplier: float = limits.BACKOFF_MULTIPLIER,
    on_attempt: AttemptCallback = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an operation with bounded exponential backoff.

    The delay before attempt n+1 is ``initial_delay_ms * multiplier**(n-1)``.
    Every failure is classified first; Auth and Parsing errors are raised
    immediately without another attempt.

    Args:
        operation: Zero-argument factory returning a fresh awaitable per attempt.
        name: Operation name for logging and error classification.
        max_attempts: Total attempts, including the first.
        initial_delay_ms: Delay before the second attempt.
        multiplier: Backoff growth factor.
        on_attempt: Optional async callback receiving attempt events.
        sleep: Coroutine used to wait out each delay, in seconds.

    Returns:
        The operation's result.

    Raises:
        GenerationError: The classified error of the last attempt.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay_ms / 1000, exp_base=multiplier),
        retry=retry_if_exception(_is_retryable),
        sleep=sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            number = attempt.retry_state.attempt_number
            try:
                result = await operation()
            except Exception as e:
                error = classify_error(e, name)
                will_retry = error.retryable and number < max_attempts
                _logger.warning(
                    f"OP:{name} | ATTEMPT_FAILED | attempt:{number}/{max_attempts} | "
                    f"kind:{error.kind.value} | retry:{will_retry} | error:{e}"
                )
                if on_attempt:
                    await on_attempt({
                        "type": "attempt_failed",
                        "operation": name,
                        "attempt": number,
                        "max_attempts": max_attempts,
                        "error_kind": error.kind.value,
                        "will_retry": will_retry,
                    })
                if error is e:
                    raise
                raise error from e

            _logger.info(f"OP:{name} | ATTEMPT_OK | attempt:{number}/{max_attempts}")
            if on_attempt:
                await on_attempt({
                    "type": "attempt_succeeded",
                    "operation": name,
                    "attempt": number,
                    "max_attempts": max_attempts,
                })
            return result

    raise AssertionError("retry loop exited without a result")


async def with_fallback(
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], Awaitable[T]],
    *,
    name: str,
) -> T:
    """Run ``primary``; if it ends in a GenerationError, run ``fallback``.

    Each callable is expected to carry its own retry budget. Only the
    fallback's failure propagates.
    """
    try:
        return await primary()
    except GenerationError as e:
        _logger.warning(
            f"OP:{name} | PRIMARY_FAILED | kind:{e.kind.value} | error:{e} | using fallback"
        )
    return await fallback()
