"""Exponential backoff retry for transient Gemini API errors."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import get_config
from .errors import is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(coro_factory: Callable[[], Awaitable[T]]) -> T:
    """Execute an async callable with exponential backoff on transient errors.

    Args:
        coro_factory: Zero-arg callable that returns a fresh awaitable each attempt.

    Returns:
        The result of the first successful call.

    Raises:
        The last exception if all attempts are exhausted or non-retryable.
    """
    cfg = get_config()
    attempts = cfg.retry_max_attempts

    for attempt in range(attempts):
        try:
            return await coro_factory()
        except Exception as exc:
            if not is_transient(exc) or attempt == attempts - 1:
                raise
            delay = min(cfg.retry_base_delay * (2 ** attempt) + random.random(), cfg.retry_max_delay)
            logger.warning("Retry %d/%d after %.1fs: %s", attempt + 1, attempts, delay, exc)
            await asyncio.sleep(delay)
    raise RuntimeError("with_retry called with zero attempts")
