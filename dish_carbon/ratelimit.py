# dish_carbon/ratelimit.py - process-wide pacing of provider calls
from __future__ import annotations
import asyncio, time
from typing import Awaitable, Callable, Optional

DEFAULT_MIN_INTERVAL_MS = 20_000


class RateLimiter:
    """
    One permit for the whole process. A caller holding the permit waits until
    min_interval has passed since the previous permitted call *started*, stamps
    its own start, then releases the permit before making its call.
    asyncio.Lock wakes waiters in arrival order.
    """

    def __init__(
        self,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = max(0, min_interval_ms) / 1000.0
        self.enabled = enabled
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_start: Optional[float] = None

    @property
    def last_start(self) -> Optional[float]:
        return self._last_start

    async def acquire_slot(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            if self._last_start is not None:
                wait = self._last_start + self.min_interval - self._clock()
                if wait > 0:
                    print(f"[ratelimit] waiting {wait:.1f}s before next provider call")
                    await self._sleep(wait)
            self._last_start = self._clock()
