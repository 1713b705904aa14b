"""Realtime event utilities (Redis pub/sub + SSE).

Committed engine events are published to a Redis channel so every API
instance can stream them to clients via Server-Sent Events (SSE).

Event payloads are JSON dictionaries with a `type` field, e.g.
`token.minted` or `token.burned`.

Publishing is best effort: the events are already durable in the
`engine_events` table, so a Redis outage must not fail a trade.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, AsyncGenerator, Dict

import redis as redis_sync
import redis.asyncio as redis


logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CHANNEL = os.getenv("REALTIME_CHANNEL", "bondline:events")


_redis: redis.Redis | None = None
_redis_sync: redis_sync.Redis | None = None


def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.from_url(REDIS_URL, decode_responses=True)
    return _redis


def get_redis_sync() -> redis_sync.Redis:
    """Blocking client for publishing from sync routes and the service layer."""
    global _redis_sync
    if _redis_sync is None:
        _redis_sync = redis_sync.from_url(REDIS_URL, decode_responses=True)
    return _redis_sync


def _sse(evt_type: str, payload: Dict[str, Any]) -> str:
    return f"event: {evt_type}\n" + f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def publish_event_sync(event: Dict[str, Any]) -> None:
    """Publish an event to Redis pub/sub from sync code."""
    try:
        get_redis_sync().publish(CHANNEL, json.dumps(event, ensure_ascii=False))
    except redis_sync.RedisError as exc:
        logger.warning("realtime publish of %s failed: %s", event.get("type"), exc)


async def sse_event_stream() -> AsyncGenerator[str, None]:
    """Yield SSE-formatted strings from Redis pub/sub."""
    r = get_redis()
    pubsub = r.pubsub()
    await pubsub.subscribe(CHANNEL)
    try:
        # Initial ping so EventSource opens immediately.
        yield "event: ping\ndata: {}\n\n"
        while True:
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message is None:
                # keepalive
                yield "event: ping\ndata: {}\n\n"
                await asyncio.sleep(10)
                continue
            data = message.get("data")
            if not data:
                continue
            try:
                obj = json.loads(data)
            except ValueError:
                obj = {"type": "unknown", "raw": str(data)}
            yield _sse(obj.get("type", "event"), obj)
    finally:
        try:
            await pubsub.unsubscribe(CHANNEL)
            await pubsub.close()
        except Exception as exc:
            logger.debug("pubsub cleanup failed: %s", exc)
