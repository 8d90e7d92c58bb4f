"""Exponential-backoff retry for transient generative-backend failures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import anthropic
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.errors import BackendResponseError, ContentValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 529 is Anthropic's "overloaded" status.
TRANSIENT_STATUS_CODES = frozenset({429, 503, 529})


def _status_code(exc: BaseException) -> int | None:
    # Anthropic errors carry ``status_code``; google.api_core errors carry ``code``.
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_transient_error(exc: BaseException) -> bool:
    """Return True if *exc* signals rate limiting or temporary unavailability."""
    if isinstance(exc, (BackendResponseError, ContentValidationError)):
        return False
    if isinstance(exc, (anthropic.RateLimitError, anthropic.APIConnectionError, TimeoutError)):
        # APIConnectionError covers APITimeoutError.
        return True

    status = _status_code(exc)
    if status is not None:
        return status in TRANSIENT_STATUS_CODES

    message = str(exc)
    return "429" in message or "503" in message


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await *operation*, retrying transient failures with exponential backoff.

    The delay before retry ``k`` (0-based) is ``base_delay * 2**k`` seconds.
    Non-transient failures propagate immediately; after *max_attempts*
    invocations the last transient failure propagates unchanged.

    Args:
        operation: Zero-argument coroutine function to call.
        max_attempts: Total number of invocations allowed.
        base_delay: Delay before the first retry, in seconds.
        sleep: Awaitable sleep, replaceable in tests.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, exp_base=2),
        retry=retry_if_exception(is_transient_error),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return await retrying(operation)
