"""
Fixed-window request rate limiter.

Counts requests per identifier (client address plus endpoint scope) in
windows of fixed length. The first request after a window expires opens
a new one. Counters live in a KeyValueStore, so every instance behind
a shared Redis enforces the same budget.

Dependencies: casevault.core.stores
System role: Request throttling for the HTTP surface
"""

import logging
import math
from dataclasses import dataclass

from casevault.core.exceptions import RateLimitedError
from casevault.core.stores import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    """Maximum ``limit`` requests per ``window_seconds``."""

    limit: int
    window_seconds: int


class RateLimiter:
    """
    Store-backed fixed-window limiter.

    Each check is one atomic increment on the store; the counter's TTL is
    the window, so expired windows disappear with their keys.

    Args:
        store: Counter storage (in-memory or Redis)
        key_prefix: Namespace for counter keys inside the store
    """

    def __init__(self, store: KeyValueStore, key_prefix: str = "ratelimit") -> None:
        self.store = store
        self.key_prefix = key_prefix

    async def check(self, identifier: str, rule: RateLimitRule) -> None:
        """
        Count one request against ``identifier``.

        Args:
            identifier: Caller key, e.g. "10.0.0.1:search:<case_id>"
            rule: Limit to enforce

        Raises:
            RateLimitedError: If the window is already full; carries retry_after
        """
        count, seconds_left = await self.store.incr(
            f"{self.key_prefix}:{identifier}", rule.window_seconds
        )
        if count <= rule.limit:
            return

        retry_after = max(1, math.ceil(seconds_left))
        logger.warning(
            "Rate limit exceeded",
            extra={"identifier": identifier, "limit": rule.limit, "retry_after": retry_after},
        )
        raise RateLimitedError(retry_after=retry_after, details={"limit": rule.limit})
