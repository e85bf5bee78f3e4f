"""
Rate Limiter for the top.gg API client.

Tracks request timestamps per bucket in a sliding window and suspends callers
until the bucket has room. Requests are only ever delayed, never dropped.
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import AsyncExitStack
from typing import Awaitable, Callable, Deque, Dict, Iterable, List, Optional

from ..models.api_config import RateLimit

logger = logging.getLogger(__name__)


class RateLimitBucket:
    """Sliding window of request timestamps for one bucket key."""

    def __init__(self, key: str, limit: RateLimit):
        self.key = key
        self.limit = limit
        self.timestamps: Deque[float] = deque()
        # asyncio.Lock hands itself to waiters in arrival order
        self.lock = asyncio.Lock()
        # Callers between looking the bucket up and releasing its lock
        self.users = 0

    def evict(self, now: float) -> None:
        """Drop timestamps that have left the window."""
        while self.timestamps and now - self.timestamps[0] >= self.limit.window_seconds:
            self.timestamps.popleft()

    def wait_time(self, now: float) -> float:
        """Seconds until a slot frees up, 0 when one is free already."""
        if len(self.timestamps) < self.limit.max_requests:
            return 0.0
        return self.timestamps[0] + self.limit.window_seconds - now

    def idle(self) -> bool:
        return not self.timestamps and not self.users


class RateLimiter:
    """
    Per-bucket sliding window rate limiter.

    The quota of a bucket is looked up by its family, the part of the key
    before ``:``, so ``bots`` and ``bots:42`` both use the ``bots`` quota.
    Buckets with nothing left in their window are dropped, so keys scoped
    per target do not accumulate.
    """

    def __init__(
        self,
        limits: Optional[Dict[str, RateLimit]] = None,
        default_limit: Optional[RateLimit] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the rate limiter.

        Args:
            limits: Quota per bucket family
            default_limit: Quota for families missing from ``limits``
            clock: Monotonic time source
            sleep: Coroutine used to wait for a free slot
        """
        self.limits: Dict[str, RateLimit] = dict(limits or {})
        self.default_limit = default_limit or RateLimit()
        self._clock = clock
        self._sleep = sleep
        self._buckets: Dict[str, RateLimitBucket] = {}

    def limit_for(self, bucket_key: str) -> RateLimit:
        family = bucket_key.split(":", 1)[0]
        return self.limits.get(family, self.default_limit)

    def _get_bucket(self, bucket_key: str) -> RateLimitBucket:
        bucket = self._buckets.get(bucket_key)
        if bucket is None:
            self._discard_idle(self._clock())
            bucket = RateLimitBucket(bucket_key, self.limit_for(bucket_key))
            self._buckets[bucket_key] = bucket
        return bucket

    def _discard_idle(self, now: float) -> None:
        for key, bucket in list(self._buckets.items()):
            bucket.evict(now)
            if bucket.idle():
                del self._buckets[key]

    async def acquire(self, bucket_key: str) -> None:
        """
        Wait for a free slot in the bucket and record the request.

        Args:
            bucket_key: Bucket the request counts against
        """
        await self.acquire_many([bucket_key])

    async def acquire_many(self, bucket_keys: Iterable[str]) -> None:
        """
        Wait until every bucket has a free slot, then record the request in
        all of them at the same instant.

        Locks are taken in sorted key order so two callers sharing buckets
        cannot deadlock. No bucket is stamped while another one is still
        full.

        Args:
            bucket_keys: Buckets the request counts against
        """
        buckets: List[RateLimitBucket] = []
        for key in sorted(set(bucket_keys)):
            bucket = self._get_bucket(key)
            bucket.users += 1
            buckets.append(bucket)

        try:
            async with AsyncExitStack() as stack:
                # The head waiter sleeps while holding the locks so later
                # callers cannot overtake it.
                for bucket in buckets:
                    await stack.enter_async_context(bucket.lock)

                while True:
                    now = self._clock()
                    for bucket in buckets:
                        bucket.evict(now)
                    delay = max(bucket.wait_time(now) for bucket in buckets)
                    if delay <= 0:
                        break
                    keys = ", ".join(bucket.key for bucket in buckets)
                    logger.debug(f"Rate limiting {keys}: waiting {delay:.2f} seconds")
                    await self._sleep(delay)

                for bucket in buckets:
                    bucket.timestamps.append(now)
        finally:
            for bucket in buckets:
                bucket.users -= 1

    def recorded(self, bucket_key: str) -> int:
        """Number of requests recorded in the bucket's current window."""
        bucket = self._buckets.get(bucket_key)
        if bucket is None:
            return 0
        bucket.evict(self._clock())
        return len(bucket.timestamps)

    def tracked_buckets(self) -> List[str]:
        """Keys of the buckets currently held in memory."""
        return sorted(self._buckets)

    def reset(self) -> None:
        """
        Forget every recorded request.

        Timestamps are cleared in place, so callers already waiting keep
        their place in line behind the same locks.
        """
        for bucket in self._buckets.values():
            bucket.timestamps.clear()
        self._discard_idle(self._clock())
