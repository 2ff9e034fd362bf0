"""
Redis Caching Layer

JSON get/set helpers for read-mostly reference data (school lookups).
Degrades gracefully: with Redis unavailable every lookup is a miss and every
write is a no-op.
"""
import json
import logging
from typing import Optional, Any
import redis
from redis.exceptions import RedisError
from core.config import settings

logger = logging.getLogger(__name__)

SCHOOL_CACHE_PREFIX = "schools"

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Shared client, or None when caching is off or Redis is unreachable."""
    global _redis_client

    if not settings.CACHE_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client

    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        client.ping()
    except RedisError as e:
        logger.warning(f"Redis unavailable: {e}. Caching disabled.")
        return None

    logger.info("Redis connection established")
    _redis_client = client
    return _redis_client


def cache_key(prefix: str, *args, **kwargs) -> str:
    """`prefix:arg:...:name:value` with None parts skipped and kwargs sorted."""
    parts = [prefix]
    parts.extend(str(arg) for arg in args if arg is not None)
    parts.extend(f"{k}:{v}" for k, v in sorted(kwargs.items()) if v is not None)
    return ":".join(parts)


def get_cache(key: str) -> Optional[Any]:
    client = get_redis_client()
    if not client:
        return None
    try:
        raw = client.get(key)
    except RedisError as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        return None
    return json.loads(raw) if raw else None


def set_cache(key: str, value: Any, ttl: Optional[int] = None) -> bool:
    """Store `value` as JSON (UUIDs and datetimes stringified). False when not stored."""
    client = get_redis_client()
    if not client:
        return False
    try:
        client.setex(key, ttl if ttl is not None else settings.CACHE_TTL_DEFAULT, json.dumps(value, default=str))
    except RedisError as e:
        logger.warning(f"Cache write failed for {key}: {e}")
        return False
    return True


def invalidate_school_cache() -> int:
    """Drop every cached school search. Called whenever the school table changes."""
    client = get_redis_client()
    if not client:
        return 0
    try:
        keys = list(client.scan_iter(match=f"{SCHOOL_CACHE_PREFIX}:*"))
        deleted = client.delete(*keys) if keys else 0
    except RedisError as e:
        logger.warning(f"School cache invalidation failed: {e}")
        return 0
    logger.info(f"Invalidated {deleted} school cache entries")
    return deleted
