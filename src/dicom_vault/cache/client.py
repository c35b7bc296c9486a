"""
Redis-backed read-through cache for owner-scoped responses.

Entries are keyed by owner and request signature so that every mutation of an
owner's files can drop exactly that owner's entries. The cache is optional:
when Redis is not configured or unreachable every call degrades to a miss.
"""
import json
from typing import Optional, Any, Protocol, runtime_checkable
from uuid import UUID

from redis.asyncio import Redis, ConnectionPool
from loguru import logger


@runtime_checkable
class CacheConfig(Protocol):
    """Protocol for cache configuration."""

    @property
    def is_cache_enabled(self) -> bool:
        ...

    @property
    def redis_url(self) -> Optional[str]:
        ...

    @property
    def redis_pool_size(self) -> int:
        ...

    @property
    def cache_ttl_default(self) -> int:
        ...

    def get_cache_key_prefix(self) -> str:
        ...


class ResponseCache:
    """Manages Redis cache operations for per-owner responses."""

    NAMESPACE = "files"

    def __init__(self, config: Optional[CacheConfig] = None, client: Optional[Redis] = None):
        self.config = config
        self.redis_client: Optional[Redis] = client
        self.pool: Optional[ConnectionPool] = None
        self.key_prefix = config.get_cache_key_prefix() if config else "dicom-vault:"
        self.is_available = client is not None
        self.connection_attempted = client is not None

    async def connect(self) -> Optional[Redis]:
        """Create and return the Redis connection.

        Returns None if Redis is not configured or unavailable.
        """
        if self.connection_attempted and not self.is_available:
            return None

        if self.redis_client is None:
            if not self.config or not self.config.is_cache_enabled:
                if not self.connection_attempted:
                    logger.info(
                        "Redis URL not configured (REDIS_URL not set). "
                        "Running without response cache."
                    )
                    self.connection_attempted = True
                return None

            try:
                logger.info("Creating Redis connection pool...")
                self.pool = ConnectionPool.from_url(
                    str(self.config.redis_url),
                    max_connections=self.config.redis_pool_size,
                    decode_responses=True,
                    health_check_interval=30
                )
                self.redis_client = Redis(connection_pool=self.pool)
                await self.redis_client.ping()
                logger.info("Redis connection established successfully")
                self.is_available = True
                self.connection_attempted = True

            except Exception as e:
                logger.warning(f"Redis connection failed: {e}. Running without response cache.")
                self.is_available = False
                self.connection_attempted = True
                await self._release()
                return None

        return self.redis_client

    async def _release(self) -> None:
        if self.redis_client is not None:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                logger.debug(f"Ignoring error while closing Redis client: {e}")
        if self.pool is not None:
            try:
                await self.pool.disconnect()
            except Exception as e:
                logger.debug(f"Ignoring error while closing Redis pool: {e}")
        self.redis_client = None
        self.pool = None

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis_client:
            await self._release()
            logger.info("Redis connection closed")

    def _owner_prefix(self, owner_id: UUID) -> str:
        return f"{self.key_prefix}{self.NAMESPACE}:{owner_id}:"

    def make_key(self, owner_id: UUID, signature: str) -> str:
        """Create the cache key for an owner's request signature."""
        return f"{self._owner_prefix(owner_id)}{signature}"

    async def get(self, owner_id: UUID, signature: str) -> Optional[Any]:
        """Get a cached JSON value, or None on miss or cache failure."""
        client = await self.connect()
        if not client:
            return None

        full_key = self.make_key(owner_id, signature)
        try:
            value = await client.get(full_key)
            if value is None:
                return None
            return json.loads(value)
        except Exception as e:
            logger.error(f"Cache get error for key {full_key}: {e}")
            return None

    async def set(self, owner_id: UUID, signature: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-serialisable value under the owner's signature."""
        client = await self.connect()
        if not client:
            return False

        full_key = self.make_key(owner_id, signature)
        if ttl is None:
            ttl = self.config.cache_ttl_default if self.config else 600

        try:
            payload = json.dumps(value, default=str)
            if ttl > 0:
                await client.setex(full_key, ttl, payload)
            else:
                await client.set(full_key, payload)
            return True
        except Exception as e:
            logger.error(f"Cache set error for key {full_key}: {e}")
            return False

    async def invalidate_owner(self, owner_id: UUID) -> int:
        """Delete every cached entry belonging to an owner."""
        client = await self.connect()
        if not client:
            return 0

        pattern = f"{self._owner_prefix(owner_id)}*"
        try:
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                deleted = await client.delete(*keys)
                logger.debug(f"Invalidated {deleted} cache entries for owner {owner_id}")
                return deleted
            return 0
        except Exception as e:
            logger.error(f"Cache invalidation error for {pattern}: {e}")
            return 0

    async def health_check(self) -> bool:
        """Check Redis health. An unconfigured cache reports unhealthy."""
        client = await self.connect()
        if not client:
            return False
        try:
            return bool(await client.ping())
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return False
