"""
Rate Limiting

This module provides the fixed-window rate limiter used by the /track endpoint.
Rate limiting prevents a single caller from flooding the visit log.

Design Decisions:
- Uses the limits library (the engine behind slowapi) directly
- Fixed window: the counter for a key resets when its window expires
- IP-based keys, extracted by the endpoint layer
- Explicit component injected as a dependency, not middleware, so it can be
  exercised without an HTTP stack

Future Enhancement:
- Move to Redis-based storage for multi-process deployments
"""

import logging

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from visit_tracker.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

RATE_LIMIT_NAMESPACE = "track"


class FixedWindowLimiter:
    """
    Per-key fixed-window counter.

    Each key gets ``limit`` accepted hits per window.
    """

    def __init__(self, limit: str = "30/minute"):
        """
        Args:
            limit: Quota string, e.g. "30/minute" or "5/second"
        """
        self.limit = limit
        self._item = parse(limit)
        self._storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self, key: str) -> None:
        """
        Consume one unit of quota for ``key``.

        Raises:
            RateLimitExceededError: If the window quota is already used up
        """
        if not self._strategy.hit(self._item, RATE_LIMIT_NAMESPACE, key):
            logger.warning(f"Rate limit {self.limit} exceeded for {key}")
            raise RateLimitExceededError(key, self.limit)

    def remaining(self, key: str) -> int:
        """Return the units left for ``key`` in its current window."""
        stats = self._strategy.get_window_stats(self._item, RATE_LIMIT_NAMESPACE, key)
        return stats.remaining

    def reset(self) -> None:
        """Clear every counter."""
        self._storage.reset()
