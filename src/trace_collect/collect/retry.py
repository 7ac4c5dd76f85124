"""Bounded retry policy shared by both sample backends."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from trace_collect.config import DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def repeat_until_pass(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    label: str = "fetch",
) -> T | None:
    """Await ``operation`` until it succeeds; ``None`` once ``max_attempts`` all failed.

    Any ``Exception`` from an attempt is logged and swallowed so that one
    broken slot never aborts the run. Cancellation is not caught.
    """

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "%s attempt %d/%d failed: %s: %s",
                label,
                attempt,
                max_attempts,
                type(exc).__name__,
                exc,
            )
    logger.warning("%s gave up after %d attempts", label, max_attempts)
    return None
