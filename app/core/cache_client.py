"""
Redis cache for content store query results.

Caching is optional: when Redis is disabled or unreachable every call
degrades to a miss and callers fetch from the content store directly.
Keys are namespaced per dataset so staging and production can share a
Redis instance.
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.config.settings import RedisSettings

logger = logging.getLogger(__name__)

# Sentinel distinguishing a cached JSON null from a miss
MISS = object()


class CacheClient:
    """Query result cache on redis.asyncio with lazy, bounded reconnects."""

    def __init__(self, redis_settings: RedisSettings, namespace: str = ""):
        self.redis_url = redis_settings.url
        self.enabled = redis_settings.enabled
        self.default_ttl = redis_settings.cache_ttl_seconds
        self.socket_timeout = float(redis_settings.socket_timeout)
        self.namespace = namespace
        self.redis_client: Optional[Redis] = None
        self._connection_lock = asyncio.Lock()
        self._is_connected = False
        self._failed_attempts = 0
        self._max_attempts = 3
        self.reconnect_backoff = redis_settings.reconnect_backoff_seconds
        self._last_failure = 0.0
        self._clock = time.monotonic

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    async def connect(self) -> bool:
        """
        Connect and ping Redis.

        Returns:
            True if connected, False when disabled or unreachable
        """
        if not self.enabled:
            logger.info("Redis cache disabled, content queries go straight to the store")
            return False

        async with self._connection_lock:
            if self._is_connected and self.redis_client:
                return True

            try:
                self.redis_client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_timeout=self.socket_timeout,
                    socket_connect_timeout=self.socket_timeout,
                )
                await self.redis_client.ping()
            except (RedisError, OSError) as e:
                self._failed_attempts += 1
                self._last_failure = self._clock()
                logger.error(
                    f"Redis unavailable (attempt {self._failed_attempts}/{self._max_attempts}): {e}"
                )
                await self._drop_connection()
                return False

            self._is_connected = True
            self._failed_attempts = 0
            logger.info(f"Connected to Redis at {self.redis_url}")
            return True

    async def disconnect(self) -> None:
        async with self._connection_lock:
            await self._drop_connection()
        logger.info("Redis cache closed")

    async def get(self, key: str) -> Optional[str]:
        """Raw cached string, or None on a miss or any Redis failure."""
        if not await self._ensure_connection():
            return None

        try:
            value = await self.redis_client.get(self._key(key))
        except (RedisError, OSError) as e:
            logger.warning(f"Cache read failed for '{key}': {e}")
            await self._drop_connection()
            return None

        logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> bool:
        """Store a string; ``ttl_seconds`` defaults to REDIS_CACHE_TTL_SECONDS."""
        if not await self._ensure_connection():
            return False

        try:
            return bool(
                await self.redis_client.set(self._key(key), value, ex=ttl_seconds or self.default_ttl)
            )
        except (RedisError, OSError) as e:
            logger.warning(f"Cache write failed for '{key}': {e}")
            await self._drop_connection()
            return False

    async def get_json(self, key: str) -> Any:
        """Decoded cached value, or ``MISS``."""
        raw = await self.get(key)
        if raw is None:
            return MISS
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry '{key}'")
            return MISS

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        return await self.set(key, json.dumps(value), ttl_seconds=ttl_seconds)

    async def _ensure_connection(self) -> bool:
        if not self.enabled:
            return False
        if self._is_connected and self.redis_client:
            return True
        if self._failed_attempts >= self._max_attempts:
            # Back off after repeated failures, then allow a fresh round of attempts
            if self._clock() - self._last_failure < self.reconnect_backoff:
                return False
            logger.info("Retrying Redis after backoff")
            self._failed_attempts = 0
        return await self.connect()

    async def _drop_connection(self) -> None:
        self._is_connected = False
        if self.redis_client:
            try:
                await self.redis_client.aclose()
            except (RedisError, OSError) as e:
                logger.debug(f"Ignoring error while closing Redis client: {e}")
            self.redis_client = None

    @property
    def is_connected(self) -> bool:
        return self._is_connected and self.redis_client is not None
