"""
Redis connection for the role cache.

Connect and per-command socket timeouts are both bounded by
``redis_timeout_seconds``, so a hung Redis surfaces as a timeout error
that ``RoleCache`` treats as a cache miss.
"""

import redis.asyncio as redis
from courier.app.core.config import settings


def build_redis_client(url: str = None, timeout: float = None) -> redis.Redis:
    timeout = timeout if timeout is not None else settings.redis_timeout_seconds
    return redis.from_url(
        url or settings.redis_url,
        decode_responses=settings.redis_decode_responses,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )


redis_client = build_redis_client()


async def get_redis():
    """FastAPI dependency; tests override it with an in-memory client."""
    return redis_client


async def ping_redis() -> bool:
    """Reachability check for ``/health``; any connection error reads as down."""
    try:
        return await redis_client.ping()
    except Exception:
        return False
