"""Retry decorator for GitHub API calls that hit rate limits.

Only rate limit failures are retried. Every other error is raised to the
caller unchanged, so label mutation failures still abort a run on the first
error.
"""

import asyncio
import functools
import inspect
import time
from typing import Any, Awaitable, Callable, Mapping, TypeVar

import structlog
from githubkit.exception import PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def is_rate_limit_failure(exc: RequestFailed) -> bool:
    """Return True when a failed request was rejected because of a rate limit."""
    status_code = exc.response.status_code
    if status_code == 429:
        return True
    if status_code != 403:
        return False
    remaining = exc.response.headers.get("x-ratelimit-remaining")
    return remaining == "0" or "rate limit" in str(exc).lower()


def wait_time_from_headers(headers: Mapping[str, str], default: float) -> float:
    """Derive how long to wait from the retry-after or x-ratelimit-reset headers."""
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            logger.warning("Invalid retry-after header value", retry_after=retry_after)

    rate_limit_reset = headers.get("x-ratelimit-reset")
    if rate_limit_reset:
        try:
            seconds_until_reset = int(rate_limit_reset) - int(time.time())
        except ValueError:
            logger.warning("Invalid x-ratelimit-reset header value", rate_limit_reset=rate_limit_reset)
        else:
            if seconds_until_reset > 0:
                return seconds_until_reset + 1

    return default


def retry_on_rate_limit(
    max_retries: int = 5,
    initial_delay: float = 10.0,
    max_delay: float = 300.0,
    exponential_base: float = 2.0,
) -> Callable[[F], F]:
    """Retry an async GitHub call while it keeps failing on rate limits.

    Args:
        max_retries: Maximum number of retries after the first attempt.
        initial_delay: Delay in seconds used when the response carries no hint.
        max_delay: Upper bound for any single wait.
        exponential_base: Multiplier applied to the fallback delay after each retry.
    """

    def decorator(func: F) -> F:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"{func.__name__} decorated with @retry_on_rate_limit must be async")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded) as exc:
                    if attempt >= max_retries:
                        logger.error("Max retries reached for GitHub rate limit", function=func.__name__, attempt=attempt + 1)
                        raise
                    retry_after = getattr(exc, "retry_after", None)
                    wait_time = retry_after.total_seconds() if retry_after else delay
                except RequestFailed as exc:
                    if not is_rate_limit_failure(exc):
                        raise
                    if attempt >= max_retries:
                        logger.error(
                            "Max retries reached for GitHub rate limit",
                            function=func.__name__,
                            attempt=attempt + 1,
                            status_code=exc.response.status_code,
                        )
                        raise
                    wait_time = wait_time_from_headers(exc.response.headers, delay)

                wait_time = min(wait_time, max_delay)
                attempt += 1
                logger.warning(
                    "GitHub rate limit exceeded, retrying",
                    function=func.__name__,
                    attempt=attempt,
                    max_retries=max_retries,
                    wait_time=wait_time,
                )
                await asyncio.sleep(wait_time)
                delay = min(delay * exponential_base, max_delay)

        return wrapper  # type: ignore

    return decorator
