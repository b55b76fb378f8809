"""Minimum-interval throttle shared by all RugCheck lookups."""

import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Throttle:
    """
    Admits at most one call per ``interval_seconds``.

    The interval is measured from the last *admitted* attempt, whether or
    not that attempt later succeeded. Rejected attempts leave the clock
    untouched. The check and the timestamp update happen under one lock
    so two concurrent tasks cannot both be admitted for the same window.
    """

    def __init__(
        self,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_invocation: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_invocation(self) -> Optional[float]:
        return self._last_invocation

    async def try_acquire(self) -> bool:
        """
        Check-and-set the throttle clock.

        Returns:
            True if the caller may proceed, False if it must skip
        """
        async with self._lock:
            now = self._clock()
            if (
                self._last_invocation is not None
                and now - self._last_invocation < self.interval_seconds
            ):
                return False
            self._last_invocation = now
            return True
