"""Timeout and fallback handling shared by every suggestion operation."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 20.0

logger = logging.getLogger(__name__)


class FallbackPolicy:
    """Run a collaborator call and substitute a fallback on any failure.

    A timeout, a raised exception, and output that fails validation are all
    treated the same way: the failure is logged and ``fallback()`` is
    returned. Cancellation is not intercepted.
    """

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout
        self.fallbacks: Counter[str] = Counter()

    async def run(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        try:
            if self.timeout is None:
                return await call()
            return await asyncio.wait_for(call(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %ss; using fallback", operation, self.timeout)
        except Exception as exc:
            logger.warning("%s failed (%s: %s); using fallback", operation, type(exc).__name__, exc)
        self.fallbacks[operation] += 1
        return fallback()
