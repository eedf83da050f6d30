# dish_carbon/retry.py - bounded exponential backoff around one provider call
from __future__ import annotations
import asyncio
from typing import Awaitable, Callable, TypeVar

from .errors import ProviderError, ProviderTimeoutError, RetriesExhaustedError

T = TypeVar("T")

MAX_RETRIES = 5
BASE_DELAY_S = 5.0
MAX_DELAY_S = 120.0

TEXT_TIMEOUT_S = 45.0
IMAGE_TIMEOUT_S = 60.0


class RetryPolicy:
    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        base_delay: float = BASE_DELAY_S,
        max_delay: float = MAX_DELAY_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def backoff(self, retry: int) -> float:
        """Wait before retry number `retry` (0-based): 5s, 10s, 20s, ... capped."""
        return min(self.max_delay, self.base_delay * (2 ** retry))

    async def _attempt(self, call: Callable[[], Awaitable[T]], timeout: float) -> T:
        try:
            return await asyncio.wait_for(call(), timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(f"provider call timed out after {timeout:.0f}s") from e

    async def run(self, call: Callable[[], Awaitable[T]], timeout: float = TEXT_TIMEOUT_S) -> T:
        """
        Run `call` with a per-attempt timeout. 429, 5xx and timeouts are retried
        up to max_retries times; anything else propagates on the first failure.
        When retries run out a single RetriesExhaustedError is raised.
        """
        retry = 0
        while True:
            try:
                return await self._attempt(call, timeout)
            except ProviderError as e:
                if not e.retryable:
                    raise
                if retry >= self.max_retries:
                    raise RetriesExhaustedError(e, attempts=retry + 1) from e
                delay = self.backoff(retry)
                retry += 1
                print(f"[retry] {e}; retry {retry}/{self.max_retries} in {delay:.0f}s")
                await self._sleep(delay)
