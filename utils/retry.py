"""
Retry utilities with exponential backoff for transient network errors.

Only read requests are retried. Mutating calls to the portal API carry no
idempotency keys, so a repeated POST or PATCH could apply twice.

Backoff doubles the delay after each failed attempt (capped at max_delay) and
multiplies it by a random factor in [0.5, 1.5) so that several clients polling
the same server do not retry in lockstep.

USAGE:
------
    from utils.retry import retry_on_transient_error, is_retryable_http_error

    @retry_on_transient_error(is_retryable=is_retryable_http_error, max_retries=3)
    def fetch_project():
        return session.get(url, timeout=30)
"""

import time
import random
from functools import wraps
from typing import Callable, Optional

import requests


def retry_on_transient_error(
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator that retries a function on transient errors with exponential backoff.

    Args:
        is_retryable: Takes an exception and returns True if the call should
                      be attempted again.
        max_retries: Retry attempts after the initial try (total attempts is
                     max_retries + 1). Zero disables retrying.
        base_delay: Delay in seconds before the first retry.
        max_delay: Upper bound for any single delay.
        on_retry: Optional callback(exc, attempt, delay) invoked before each
                  retry, used for logging.
        sleep: Function used to wait between attempts.

    Returns:
        A decorator that wraps functions with retry logic.

    Raises:
        The last exception encountered if all retries are exhausted, or
        immediately if the exception is not retryable.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)

                except Exception as exc:
                    if not is_retryable(exc):
                        raise

                    last_exception = exc

                    if attempt < max_retries:
                        delay = min(base_delay * (2 ** attempt), max_delay)
                        delay *= 0.5 + random.random()

                        if on_retry:
                            on_retry(exc, attempt + 1, delay)

                        sleep(delay)

            raise last_exception

        return wrapper
    return decorator


# HTTP status codes that indicate transient server issues
TRANSIENT_HTTP_STATUS_CODES = {
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}

TRANSIENT_NETWORK_EXCEPTIONS = (
    requests.ConnectionError,
    requests.Timeout,
)


def is_transient_network_error(exc: Exception) -> bool:
    """Check if an exception is a connection failure or timeout."""
    return isinstance(exc, TRANSIENT_NETWORK_EXCEPTIONS)


def is_retryable_http_error(exc: Exception) -> bool:
    """Check if a requests exception is worth retrying.

    HTTP errors are retried only for TRANSIENT_HTTP_STATUS_CODES; a 404 or
    422 will not change by asking again.
    """
    if isinstance(exc, requests.HTTPError):
        response = exc.response
        return response is not None and response.status_code in TRANSIENT_HTTP_STATUS_CODES
    return is_transient_network_error(exc)
