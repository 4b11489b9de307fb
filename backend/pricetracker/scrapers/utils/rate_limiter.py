"""Token bucket rate limiter for per-source rate limiting."""

import asyncio
import time
from typing import Dict, Optional


class TokenBucket:
    """Token bucket algorithm implementation for rate limiting.

    The bucket starts full and refills at a constant rate.
    Each request consumes one token. If no tokens are available,
    the request waits until tokens are refilled.
    """

    def __init__(self, rate: float, capacity: float = 1.0):
        """Initialize token bucket.

        Args:
            rate: Tokens per second (e.g., 2.0 = one request every 500ms)
            capacity: Maximum tokens in bucket (burst capacity)
        """
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = rate  # tokens per second
        self.capacity = capacity
        self.tokens = capacity
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time since last refill."""
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.last_refill = now

    async def acquire(self, tokens: float = 1.0) -> None:
        """Acquire tokens from the bucket, waiting if necessary.

        Callers queue on the bucket lock, so concurrent acquisitions are
        served one at a time at the configured rate.

        Args:
            tokens: Number of tokens to acquire (default 1.0)
        """
        async with self._lock:
            while True:
                self._refill()
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                # Calculate wait time until we have enough tokens
                wait_time = (tokens - self.tokens) / self.rate
                await asyncio.sleep(wait_time)


class SourceRateLimiter:
    """Per-source rate limiter using token bucket algorithm.

    Each source (keyed by its scraper type, e.g. "amazon") gets its own token
    bucket, created on first use and kept for the life of the process. All
    jobs targeting the same source share that bucket.

    Buckets hold a single token so that N acquisitions for one source never
    take less than (N - 1) / rate seconds.
    """

    DEFAULT_RATE = 2.0  # requests per second

    def __init__(self, rates: Optional[Dict[str, float]] = None, default_rate: float = DEFAULT_RATE):
        """Initialize rate limiter.

        Args:
            rates: Requests per second keyed by source
            default_rate: Rate for sources missing from ``rates``
        """
        self._rates: Dict[str, float] = dict(rates or {})
        self.default_rate = default_rate
        self._buckets: Dict[str, TokenBucket] = {}

    def _get_bucket(self, source_key: str) -> TokenBucket:
        """Get or create the token bucket for a source."""
        if source_key not in self._buckets:
            rate = self._rates.get(source_key, self.default_rate)
            self._buckets[source_key] = TokenBucket(rate=rate)
        return self._buckets[source_key]

    async def acquire(self, source_key: str) -> None:
        """Acquire a request permit for a source.

        This method will block until rate limit allows the request.

        Args:
            source_key: Source identifier to rate limit
        """
        bucket = self._get_bucket(source_key)
        await bucket.acquire()

    def set_rate(self, source_key: str, rate: float) -> None:
        """Set a custom rate for a source.

        Note:
            If a bucket already exists for this source, it will be replaced.
        """
        self._rates[source_key] = rate
        self._buckets[source_key] = TokenBucket(rate=rate)

    def get_rate(self, source_key: str) -> float:
        """Get the configured rate (requests per second) for a source."""
        return self._get_bucket(source_key).rate
