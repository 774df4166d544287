"""
Redis caching utilities.

Used for reverse-geocode results and for the ephemeral "visited today" marks.
Every operation fails open: when Redis is not configured or unreachable the
cache behaves as empty and callers carry on.
"""
import json
import logging
from typing import Any, Optional, Set

import redis

from . import config

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create the Redis client.

    Returns None when REDIS_URL is not set. Raises if the server cannot be reached.
    """
    global redis_client

    if redis_client is None:
        if not config.REDIS_URL:
            return None

        # Mask password in URL for logging
        if "@" in config.REDIS_URL:
            url_parts = config.REDIS_URL.split("@")
            protocol = url_parts[0].split(":")[0]
            masked_url = f"{protocol}:****@{url_parts[1]}"
        else:
            masked_url = "****"
        logger.info(f"Using Redis URL connection: {masked_url}")

        try:
            client = redis.from_url(
                config.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
                max_connections=20,
            )
            client.ping()
            redis_client = client
            logger.info("Redis connected successfully via URL")
        except Exception as e:
            logger.error(f"Failed to connect to Redis via URL: {str(e)}")
            raise

    return redis_client


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")
            return False

    def add_member(self, key: str, member: str, ttl: int) -> bool:
        """Add a member to a set and refresh the set's TTL"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.sadd(key, member)
            client.expire(key, ttl)
            return True
        except Exception as e:
            logger.error(f"Cache set-add error for {key}: {e}")
            return False

    def remove_member(self, key: str, member: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            return bool(client.srem(key, member))
        except Exception as e:
            logger.error(f"Cache set-remove error for {key}: {e}")
            return False

    def members(self, key: str) -> Set[str]:
        client = self._get_client()
        if not client:
            return set()

        try:
            return set(client.smembers(key) or ())
        except Exception as e:
            logger.error(f"Cache set-members error for {key}: {e}")
            return set()


# Global cache instance
cache = Cache()
