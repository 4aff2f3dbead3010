"""Bounded retry with jittered backoff for exit-code-returning operations.

Attempts run until one exits 0 or the attempt budget is spent. Each backoff
is drawn uniformly from ``[min_backoff, max_backoff]``, independently of the
attempt number. The value returned is always the last attempt's exit code.

Cancellation is never treated as a failed attempt: a ``CancelledError``
raised by an attempt or by the backoff sleep propagates unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

from gitdrive.constants import (
    FETCH_MAX_ATTEMPTS,
    FETCH_MAX_BACKOFF_SECONDS,
    FETCH_MIN_BACKOFF_SECONDS,
)

__all__ = ["RetryState", "retry_exit_code"]


@dataclass(slots=True)
class RetryState:
    """Progress of one retryable call.

    Attributes:
        attempt_count: Attempts started so far.
        last_exit_code: Exit code of the most recent finished attempt.
        delays: Backoff delays drawn so far, in seconds.
    """

    attempt_count: int = 0
    last_exit_code: int | None = None
    delays: list[float] = field(default_factory=list)


class _NonZeroExit(Exception):
    """Signals tenacity that an attempt failed and may be retried."""

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"exit code {exit_code}")
        self.exit_code = exit_code


async def retry_exit_code(
    attempt: Callable[[], Awaitable[int]],
    *,
    max_attempts: int = FETCH_MAX_ATTEMPTS,
    min_backoff: float = FETCH_MIN_BACKOFF_SECONDS,
    max_backoff: float = FETCH_MAX_BACKOFF_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Callable[[int, float], None] | None = None,
    state: RetryState | None = None,
) -> int:
    """Run *attempt* until it returns 0 or *max_attempts* is reached.

    Args:
        attempt: Zero-argument coroutine function returning an exit code.
        max_attempts: Total attempts, including the first.
        min_backoff: Lower bound of the backoff draw, in seconds.
        max_backoff: Upper bound of the backoff draw, in seconds.
        sleep: Awaitable sleep; replaced by tests.
        on_retry: Called with (failed exit code, delay) before each backoff.
        state: Optional state object updated in place.

    Returns:
        The exit code of the last attempt made.

    Raises:
        asyncio.CancelledError: If cancelled during an attempt or a backoff.
    """
    state = state if state is not None else RetryState()

    def before_sleep(retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        state.delays.append(delay)
        if on_retry is not None and state.last_exit_code is not None:
            on_retry(state.last_exit_code, delay)

    try:
        async for attempt_ctx in AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_random(min=min_backoff, max=max_backoff),
            retry=retry_if_exception_type(_NonZeroExit),
            before_sleep=before_sleep,
            sleep=sleep,
            reraise=True,
        ):
            with attempt_ctx:
                state.attempt_count += 1
                exit_code = await attempt()
                state.last_exit_code = exit_code
                if exit_code != 0:
                    raise _NonZeroExit(exit_code)
                return exit_code
    except _NonZeroExit as e:
        # Attempts exhausted; surface the last failure as-is
        return e.exit_code

    # Should not reach here, but satisfy type checker
    assert state.last_exit_code is not None
    return state.last_exit_code
