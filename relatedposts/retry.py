"""
Retry policies with backoff for transient failures.

A RetryPolicy is a plain value (attempt budget + backoff function + which
exceptions count as retryable), so callers and tests can inspect it.
retry_call applies a policy to any callable; with_retry is the decorator
form.
"""

import time
import functools
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Type


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def exponential(
    base_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 60.0,
) -> Callable[[int], float]:
    """
    Backoff of base_delay * factor ** (attempt - 1), capped at max_delay.

    Example:
        >>> backoff = exponential(base_delay=0.5)
        >>> [backoff(n) for n in (1, 2, 3)]
        [0.5, 1.0, 2.0]
    """
    def backoff(attempt: int) -> float:
        return min(base_delay * factor ** (attempt - 1), max_delay)
    return backoff


def linear(step: float) -> Callable[[int], float]:
    """Backoff of step * attempt."""
    def backoff(attempt: int) -> float:
        return step * attempt
    return backoff


@dataclass(frozen=True)
class RetryPolicy:
    """
    Args:
        max_attempts: Total attempts including the first one (>= 1)
        backoff: Seconds to wait after failed attempt n (1-based)
        exceptions: Exception types that trigger a retry
    """
    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=exponential)
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")


def retry_call(
    policy: RetryPolicy,
    func: Callable,
    *args,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    **kwargs,
):
    """
    Call func(*args, **kwargs) under policy.

    Exceptions outside policy.exceptions propagate unchanged. When every
    attempt fails, RetryError is raised from the last exception.

    Args:
        policy: Attempt budget, backoff and retryable exceptions
        func: Callable to invoke
        sleep: Wait function (injected in tests)
        on_retry: Optional callback(attempt, exception, delay) before each wait
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return func(*args, **kwargs)
        except policy.exceptions as e:
            if attempt >= policy.max_attempts:
                raise RetryError(
                    f"Failed after {policy.max_attempts} attempts: {e}",
                    attempts=attempt,
                ) from e
            delay = policy.backoff(attempt)
            if on_retry:
                on_retry(attempt, e, delay)
            sleep(delay)


def with_retry(policy: RetryPolicy, on_retry: Optional[Callable] = None):
    """
    Decorator form of retry_call.

    Example:
        @with_retry(RetryPolicy(max_attempts=3, exceptions=(ConnectionError,)))
        def fetch_data(url):
            return requests.get(url)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return retry_call(policy, func, *args, on_retry=on_retry, **kwargs)
        return wrapper
    return decorator


def is_transient_error(exception: Exception) -> bool:
    """
    Determine if an exception is likely transient and should be retried.

    Args:
        exception: Exception to check

    Returns:
        True if error is likely transient (timeout, connection, 5xx)
    """
    error_str = str(exception).lower()

    transient_keywords = [
        'timeout',
        'connection',
        'temporary failure',
        'service unavailable',
        '503',
        '502',
        '500',
        '429',  # Rate limit
        'read timed out',
        'connection reset',
    ]

    return any(keyword in error_str for keyword in transient_keywords)


def should_retry_http_status(status_code: int) -> bool:
    """
    Check if HTTP status code indicates a retryable error.

    Args:
        status_code: HTTP status code

    Returns:
        True if should retry
    """
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    return status_code in retryable_codes
