"""
Async retry with exponential backoff for task API calls.

Transient failures (5xx responses, timeouts, connection errors) are retried
with exponential backoff and jitter; client errors (4xx) are raised
immediately.

Example:
    >>> from taskboard.core.config.models import RetryConfig
    >>>
    >>> @async_retry(RetryConfig(max_retries=2))
    ... async def fetch(client: httpx.AsyncClient) -> httpx.Response:
    ...     response = await client.get("/tasks")
    ...     response.raise_for_status()
    ...     return response
"""

import asyncio
import functools
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from taskboard.core.config.models import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def calculate_delay(config: RetryConfig, attempt: int) -> float:
    """
    Calculate delay for a given retry attempt.

    Uses exponential backoff: delay = base_delay * (multiplier ^ attempt),
    optionally with ±jitter_ratio random variance.

    Args:
        config: Retry settings
        attempt: Retry attempt number (0-indexed)

    Returns:
        Delay in seconds before next retry
    """
    delay = config.base_delay * (config.multiplier**attempt)

    if config.jitter:
        variance = delay * config.jitter_ratio
        delay = delay + random.uniform(-variance, variance)

    return max(0.0, delay)


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if an exception represents a transient, retryable error.

    Args:
        exception: Exception to check

    Returns:
        True for 5xx responses, timeouts and other request errors
    """
    # HTTPStatusError first: only 5xx is transient
    if isinstance(exception, httpx.HTTPStatusError):
        return 500 <= exception.response.status_code < 600

    if isinstance(exception, (httpx.TimeoutException, httpx.RequestError)):
        return True

    return isinstance(exception, httpx.HTTPError)


def async_retry(
    config: RetryConfig,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator adding retry with exponential backoff to a coroutine function.

    Args:
        config: Retry settings

    Returns:
        Decorator wrapping the coroutine function
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            func_name = getattr(func, "__name__", repr(func))

            for attempt in range(config.max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable_error(e):
                        logger.debug(
                            f"{func_name}: Non-retryable error on attempt {attempt + 1}: {e}"
                        )
                        raise

                    if attempt >= config.max_retries:
                        logger.warning(
                            f"{func_name}: Max retries ({config.max_retries}) exceeded: {e}"
                        )
                        raise

                    delay = calculate_delay(config, attempt)
                    logger.info(
                        f"{func_name}: Retry attempt {attempt + 1}/{config.max_retries} "
                        f"after {delay:.2f}s due to: {e}"
                    )
                    await asyncio.sleep(delay)

            raise RuntimeError("Retry loop completed without success or exception")

        return wrapper

    return decorator


__all__ = [
    "async_retry",
    "calculate_delay",
    "is_retryable_error",
]
