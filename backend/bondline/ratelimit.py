"""Redis-backed rate limiting.

Limits are enforced across API workers with a fixed-window
INCR-with-expiry strategy:
 - INCR key
 - if the key has no TTL yet: EXPIRE key window

Set `RATE_LIMIT_ENABLED=false` to switch limiting off (local runs, tests).
"""

import logging
import os
from typing import Callable, Optional

from fastapi import HTTPException, Request
import redis.asyncio as redis


logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
TRADE_RATE_LIMIT_PER_MINUTE = int(os.getenv("TRADE_RATE_LIMIT_PER_MINUTE", "30"))

_redis = redis.from_url(REDIS_URL, decode_responses=True)


async def hit_limit(key: str, limit: int, window_seconds: int) -> int:
    """Increment key and return current count.

    Raises on Redis errors only if RATE_LIMIT_FAIL_OPEN is false.
    """
    try:
        pipe = _redis.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = await pipe.execute()
        if ttl == -1:
            await _redis.expire(key, window_seconds)
        return int(count)
    except Exception as exc:
        # Fail-open by default so Redis blips don't take down the API.
        fail_open = os.getenv("RATE_LIMIT_FAIL_OPEN", "true").lower() == "true"
        if fail_open:
            logger.warning("rate limit check for %s skipped: %s", key, exc)
            return 0
        raise


def rate_limit_dependency(
    *,
    scope: str,
    limit: int,
    window_seconds: int,
    key_func: Optional[Callable[[Request], str]] = None,
):
    """Return a FastAPI dependency enforcing a Redis rate limit."""

    async def _dep(request: Request) -> None:
        if not RATE_LIMIT_ENABLED:
            return
        base = key_func(request) if key_func else request.client.host if request.client else "unknown"
        key = f"rl:{scope}:{base}"
        count = await hit_limit(key, limit, window_seconds)
        if count and count > limit:
            raise HTTPException(status_code=429, detail="Rate limit exceeded")

    return _dep
