"""
Retry Utilities for catalog layer discovery.

ArcGIS servers in public catalogs are often slow or briefly unavailable.
Fetches report failure by returning None rather than raising, so retries
here are driven by the result, with a linear backoff between attempts.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


async def retry_until_result(
    func: Callable[..., Awaitable[T | None]],
    *args: Any,
    max_attempts: int = 3,
    backoff_step: float = 1.5,
    label: str = "",
    **kwargs: Any,
) -> T | None:
    """
    Call an async function until it returns something other than None.

    Args:
        func: Async function returning None on (soft) failure
        *args: Positional arguments for func
        max_attempts: Total number of attempts (default: 3)
        backoff_step: Delay before retry N is backoff_step * N seconds
        label: What is being fetched, for log lines (usually the URL)
        **kwargs: Keyword arguments for func

    Returns:
        First non-None result, or None if every attempt failed
    """
    log = logger.bind(func=func.__name__, target=label, max_attempts=max_attempts)

    for attempt in range(1, max_attempts + 1):
        result = await func(*args, **kwargs)
        if result is not None:
            return result

        if attempt < max_attempts:
            delay = backoff_step * attempt
            log.info("Retrying", attempt=attempt, delay=round(delay, 2))
            await asyncio.sleep(delay)

    log.warning("All retry attempts failed", attempts=max_attempts)
    return None
