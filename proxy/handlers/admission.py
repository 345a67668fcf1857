"""
Admission control: minimum spacing between accepted requests.
"""
import asyncio
import logging
import math
import time
from typing import Callable, Optional

from errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforces ``interval_seconds`` between two accepted requests.

    With ``wait`` enabled an early request sleeps until its slot opens;
    otherwise it is rejected with ``RateLimitExceeded``. An interval of 0
    disables the check.
    """

    def __init__(
        self,
        interval_seconds: float = 0,
        wait: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval_seconds = interval_seconds
        self.wait = wait
        self._clock = clock
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.interval_seconds) and self.interval_seconds > 0

    async def check(self, request_id: str = "-") -> None:
        """Admit the request or raise RateLimitExceeded"""
        if not self.enabled:
            return

        async with self._lock:
            now = self._clock()
            if self._last_request is None:
                self._last_request = now
                return

            elapsed = now - self._last_request
            if elapsed >= self.interval_seconds:
                self._last_request = now
                return

            remaining = self.interval_seconds - elapsed
            if not self.wait:
                logger.warning(f"[{request_id}] Rate limit exceeded, {remaining:.1f}s until next slot")
                raise RateLimitExceeded(
                    f"Rate limit exceeded. Wait {math.ceil(remaining)} seconds before the next request."
                )

            logger.info(f"[{request_id}] Rate limit reached, waiting {math.ceil(remaining)}s")
            await asyncio.sleep(remaining)
            self._last_request = self._clock()
            logger.info(f"[{request_id}] Rate limit wait completed")
