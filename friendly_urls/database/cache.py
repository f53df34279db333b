"""Redis cache of resolved friendly URLs."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .models import normalize_friendly_url


class RedisCache:
    """Caches friendly URL -> original URL for the resolution hot path.
    
    Keys are the normalized friendly URL under ``KEY_PREFIX``, so lookups are
    case-insensitive like the store. Every Redis failure is logged and treated
    as a cache miss; the store stays the source of truth.
    """
    
    KEY_PREFIX = "friendly:url:"
    
    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.
        
        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL of cached resolutions
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None
    
    @property
    def available(self) -> bool:
        return self.enabled and self.client is not None
    
    async def connect(self) -> None:
        """Connect to Redis. The cache disables itself if Redis is unreachable."""
        if not self.enabled:
            return
        
        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info(f"Connected to Redis, caching resolutions for {self.ttl_seconds}s")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis, resolution cache disabled: {e}")
            self.enabled = False
    
    def get_cache_key(self, friendly_url: str) -> str:
        """Cache key of a friendly URL."""
        return f"{self.KEY_PREFIX}{normalize_friendly_url(friendly_url)}"
    
    async def get_original_url(self, friendly_url: str) -> Optional[str]:
        """Look up a cached resolution.
        
        Args:
            friendly_url: Friendly URL path (any case)
        
        Returns:
            Original URL or None on a miss
        """
        if not self.available:
            return None
        
        try:
            return await self.client.get(self.get_cache_key(friendly_url))
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache lookup failed for {friendly_url}: {e}")
            return None
    
    async def store(self, friendly_url: str, original_url: str) -> bool:
        """Cache a resolution.
        
        Args:
            friendly_url: Friendly URL path
            original_url: Redirect target
        
        Returns:
            True if cached
        """
        if not self.available:
            return False
        
        try:
            await self.client.setex(self.get_cache_key(friendly_url), self.ttl_seconds, original_url)
            return True
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache store failed for {friendly_url}: {e}")
            return False
    
    async def evict(self, friendly_url: str) -> bool:
        """Drop a cached resolution.
        
        Returns:
            True if an entry was removed
        """
        if not self.available:
            return False
        
        try:
            return await self.client.delete(self.get_cache_key(friendly_url)) > 0
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache eviction failed for {friendly_url}: {e}")
            return False
    
    async def ping(self) -> bool:
        if not self.available:
            return False
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            self.logger.error(f"Cache ping error: {e}")
            return False
    
    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")
