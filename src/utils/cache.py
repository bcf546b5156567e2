"""Redis caching for expensive read views.

The cache is optional: when Redis cannot be reached at startup every
operation becomes a no-op and callers fall through to the database.
"""

import json
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

import redis.asyncio as redis

from src.config import get_settings
from src.constants import CACHE_TTL_STATS
from src.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """Async Redis cache client with JSON serialization."""

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._client: redis.Redis | None = None
        self._connected = False

    async def _get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self._url or str(get_settings().redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def connect(self) -> bool:
        """Test Redis connection."""
        try:
            client = await self._get_client()
            await client.ping()
            self._connected = True
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Redis cache unavailable: {e}")
            self._connected = False
        return self._connected

    async def ping(self) -> bool:
        """Ping Redis to check connection health."""
        try:
            client = await self._get_client()
            return bool(await client.ping())
        except (redis.RedisError, OSError) as e:
            logger.debug(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False

    async def get(self, key: str) -> Any | None:
        """Get a cached value, or None if missing, expired or unavailable."""
        if not self._connected:
            return None

        try:
            client = await self._get_client()
            data = await client.get(key)
            return json.loads(data) if data else None
        except (redis.RedisError, OSError, ValueError) as e:
            logger.debug(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: timedelta | int = CACHE_TTL_STATS) -> bool:
        """Set a JSON-serializable value with a TTL (seconds or timedelta)."""
        if not self._connected:
            return False

        try:
            client = await self._get_client()
            expire_seconds = int(ttl.total_seconds()) if isinstance(ttl, timedelta) else ttl
            await client.setex(key, expire_seconds, json.dumps(value, default=str))
            return True
        except (redis.RedisError, OSError, TypeError) as e:
            logger.debug(f"Cache set error for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete value from cache."""
        if not self._connected:
            return False

        try:
            client = await self._get_client()
            await client.delete(key)
            return True
        except (redis.RedisError, OSError) as e:
            logger.debug(f"Cache delete error for {key}: {e}")
            return False

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: timedelta | int = CACHE_TTL_STATS,
    ) -> Any:
        """Return the cached value, computing and caching it on a miss."""
        value = await self.get(key)
        if value is None:
            value = await factory()
            if value is not None:
                await self.set(key, value, ttl)
        return value


# Global cache instance
cache = RedisCache()


def channel_stats_key(user_id: str) -> str:
    return f"stats:channel:{user_id}"


async def invalidate_channel_stats(*user_ids: str | None) -> None:
    """Drop the cached dashboard stats of every given channel."""
    for user_id in dict.fromkeys(uid for uid in user_ids if uid):
        await cache.delete(channel_stats_key(user_id))
