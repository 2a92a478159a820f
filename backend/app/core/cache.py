"""
Redis Cache Service
====================
Redis connection used for request rate limiting.

Everything here fails open: when Redis is down, requests are allowed
and nothing is cached.
"""

from typing import Optional
import redis.asyncio as redis
import structlog

from app.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


class CacheService:
    """Redis-based rate limit counters for the application."""
    
    _instance: Optional["CacheService"] = None
    _redis: Optional[redis.Redis] = None
    
    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    async def connect(self, url: Optional[str] = None) -> None:
        """Initialize Redis connection."""
        if self._redis is None:
            url = url or settings.redis_url
            try:
                self._redis = redis.from_url(
                    url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                # Test connection
                await self._redis.ping()
                logger.info("Redis cache connected", url=url)
            except Exception as e:
                logger.warning("Redis connection failed, rate limiting disabled", error=str(e))
                self._redis = None
    
    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.close()
            self._redis = None
            logger.info("Redis cache disconnected")
    
    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self._redis is not None
    
    # ==================== Rate Limiting ====================
    
    async def check_rate_limit(
        self, 
        identifier: str, 
        limit: int = 10, 
        window_seconds: int = 60
    ) -> tuple[bool, int]:
        """
        Check if request is within rate limit.
        
        Returns:
            tuple: (is_allowed, remaining_requests)
        """
        if not self._redis:
            return True, limit  # Allow if Redis not available
        
        key = f"ratelimit:{identifier}"
        
        try:
            current = await self._redis.incr(key)
            
            if current == 1:
                await self._redis.expire(key, window_seconds)
            
            remaining = max(0, limit - current)
            is_allowed = current <= limit
            
            return is_allowed, remaining
        except Exception as e:
            logger.warning("Rate limit check failed", identifier=identifier, error=str(e))
            return True, limit  # Allow on error


# Singleton instance
cache_service = CacheService()
