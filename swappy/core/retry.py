"""
Exponential backoff for upstream rate limits (HTTP 429).

Shared by the model call in the agent loop and the search call inside the
vector_search tool. Anything that is not a rate limit propagates untouched.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from swappy.core.config import MAX_RETRY_ATTEMPTS, RETRY_BASE_DELAY_MS, RETRY_MAX_DELAY_MS
from swappy.core.errors import MaxRetriesExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_STATUS = 429


def has_status(err: BaseException, status: int) -> bool:
    """True if status_code / status / code on the error, or on its HTTP response, equals status."""
    for obj in (err, getattr(err, "response", None)):
        if obj is None:
            continue
        for attr in ("status_code", "status", "code"):
            value = getattr(obj, attr, None)
            if value is None or isinstance(value, bool):
                continue
            try:
                if int(value) == status:
                    return True
            except (TypeError, ValueError):
                continue
    return False


def is_rate_limited(err: BaseException) -> bool:
    return has_status(err, RATE_LIMIT_STATUS)


def backoff_delay_ms(attempt: int) -> int:
    """Delay before retrying after a failed attempt (attempt counted from 1)."""
    return min(RETRY_BASE_DELAY_MS * 2**attempt, RETRY_MAX_DELAY_MS)


async def execute_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = MAX_RETRY_ATTEMPTS,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Await operation(); on a rate-limit error sleep min(1000 * 2^attempt, 30000) ms and retry.

    Non-rate-limit errors are re-raised on the first occurrence. If the last
    attempt is still rate limited, MaxRetriesExceededError is raised (chained
    from the final 429).
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as err:
            if not is_rate_limited(err):
                raise
            if attempt >= max_attempts:
                logger.warning("[retry] rate limited on final attempt %d/%d", attempt, max_attempts)
                raise MaxRetriesExceededError() from err
            delay = backoff_delay_ms(attempt)
            logger.warning("[retry] rate limit, sleeping %dms (attempt %d)", delay, attempt)
            await sleep(delay / 1000)
    raise MaxRetriesExceededError()
