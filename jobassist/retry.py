"""
Bounded retry with exponential backoff.

The controller is blind: any exception is retried the same way
unless ``should_retry`` says otherwise. It never logs or swallows the final
error; the caller decides how to report it.
"""

import time
from typing import Callable, Optional, TypeVar

from jobassist.errors import RequestTimeout, is_retryable

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY = 1.0


def backoff_delay(attempt: int, base_delay: float = BASE_DELAY) -> float:
    """Delay before the attempt after ``attempt`` (0-based): 1s, 2s, 4s, ..."""
    return base_delay * (2**attempt)


def retry_with_backoff(
    operation: Callable[[], T],
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    deadline: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_retry: Optional[Callable[[int, float, BaseException], None]] = None,
) -> T:
    """
    Run ``operation`` up to ``max_retries`` times, sleeping between failures.

    Args:
        operation: Zero-argument callable doing one attempt
        max_retries: Total number of attempts (at least one is always made)
        base_delay: Delay after the first failure; doubles after each further one
        should_retry: Predicate deciding whether a failure may be retried
        deadline: Absolute ``clock()`` value after which no attempt or sleep starts
        sleep: Sleep function (injected by tests)
        clock: Monotonic clock used with ``deadline``
        on_retry: Called as ``on_retry(attempt, delay, error)`` before each sleep

    Raises:
        The last error raised by ``operation``, or RequestTimeout when the
        deadline is reached first.
    """
    attempts = max(1, max_retries)
    for attempt in range(attempts):
        if deadline is not None and clock() >= deadline:
            raise RequestTimeout(f"Request timed out before attempt {attempt + 1}/{attempts}")
        try:
            return operation()
        except Exception as error:
            if attempt == attempts - 1 or not should_retry(error):
                raise
            delay = backoff_delay(attempt, base_delay)
            if deadline is not None and clock() + delay > deadline:
                raise RequestTimeout(
                    f"Request timed out after {attempt + 1}/{attempts} attempts"
                ) from error
            if on_retry is not None:
                on_retry(attempt, delay, error)
            sleep(delay)
    # unreachable: the last attempt either returns or raises
    raise RuntimeError("retry loop exited without a result")
