"""
Role cache backed by Redis.

Holds ``email -> role`` for the identity gate. Every role write stores
the new role; a write that matched no user drops the entry. Redis
failures are logged and read as a miss so role resolution falls back to
storage.
"""

import logging
from typing import Optional

from courier.app.core.config import settings
from courier.app.models.enums import UserRole

logger = logging.getLogger("courier.role_cache")

ROLE_KEY_PREFIX = "user:role:"


class RoleCache:

    def __init__(self, redis, ttl_seconds: int = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.role_cache_ttl_seconds

    @staticmethod
    def _key(email: str) -> str:
        return f"{ROLE_KEY_PREFIX}{email}"

    async def get(self, email: str) -> Optional[UserRole]:
        try:
            value = await self.redis.get(self._key(email))
        except Exception as exc:
            logger.warning("Role cache read failed for %s: %s", email, exc)
            return None
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode()
        try:
            return UserRole(value)
        except ValueError:
            return None

    async def set(self, email: str, role: UserRole) -> None:
        try:
            await self.redis.set(self._key(email), role.value, ex=self.ttl_seconds)
        except Exception as exc:
            logger.warning("Role cache write failed for %s: %s", email, exc)

    async def invalidate(self, email: str) -> None:
        try:
            await self.redis.delete(self._key(email))
        except Exception as exc:
            logger.warning("Role cache invalidation failed for %s: %s", email, exc)
