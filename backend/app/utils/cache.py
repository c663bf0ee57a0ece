"""Redis caching utilities for EasyRent.

Provides the shared Redis clients, a decorator for caching expensive
read queries, and pattern-based invalidation. Cached reads are scoped
to their owner through the key builder, e.g. ``properties:{user_id}:...``.
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

import redis.asyncio as redis
from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pools: text (cache) and binary (staged uploads)
_redis_client: Optional[redis.Redis] = None
_binary_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def get_binary_redis() -> redis.Redis:
    """Redis client returning raw bytes, for file blobs."""
    global _binary_client
    if _binary_client is None:
        _binary_client = redis.from_url(settings.redis_url, max_connections=20)
    return _binary_client


async def close_redis():
    """Close Redis connections (call on app shutdown)."""
    global _redis_client, _binary_client
    for client in (_redis_client, _binary_client):
        if client:
            await client.aclose()
    _redis_client = None
    _binary_client = None


def cache_key(*args, **kwargs) -> str:
    """Generate a cache key from function arguments.

    Creates a deterministic hash from function name and arguments.
    """
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True)
    return hashlib.md5(key_data.encode()).hexdigest()


def _keyword_identity(kwargs: dict) -> dict:
    """Simple keyword values identify a call; positional args are injected
    dependencies (AsyncSession) and never part of the key."""
    identity = {}
    for k, v in kwargs.items():
        if k.startswith("_"):
            continue
        if isinstance(v, (int, str, bool, float, type(None))):
            identity[k] = v
        elif isinstance(v, (date, datetime)):
            identity[k] = v.isoformat()
    return identity


def _to_jsonable(result):
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json")
    if isinstance(result, list) and result and hasattr(result[0], "model_dump"):
        return [item.model_dump(mode="json") for item in result]
    return result


def cached(
    ttl: int = 300,
    prefix: str = "cache",
    key_builder: Optional[Callable] = None,
):
    """Decorator to cache function results in Redis.

    Args:
        ttl: Time-to-live in seconds (default: 300 = 5 minutes)
        prefix: Cache key prefix for namespacing
        key_builder: Custom function to build cache key from args/kwargs

    Example:
        @cached(ttl=120, prefix="properties", key_builder=_list_key)
        async def list_properties(db: AsyncSession, *, user_id: str, limit: int = 50):
            ...

    Cache keys: {prefix}:{function_name}:{args_hash} unless key_builder is given.
    A cache hit returns the JSON-decoded value, not the original objects.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if key_builder:
                key = key_builder(*args, **kwargs)
            else:
                key = f"{prefix}:{func.__name__}:{cache_key(**_keyword_identity(kwargs))}"

            try:
                redis_client = await get_redis()
                cached_value = await redis_client.get(key)

                if cached_value:
                    logger.debug(f"Cache HIT: {key}")
                    return json.loads(cached_value)

                logger.debug(f"Cache MISS: {key}")
                result = await func(*args, **kwargs)

                await redis_client.setex(key, ttl, json.dumps(_to_jsonable(result), default=str))
                return result

            except redis.RedisError as e:
                # If Redis fails, log and continue without caching
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

        return wrapper

    return decorator


async def invalidate_cache(pattern: str):
    """Invalidate cache keys matching a pattern.

    Example:
        await invalidate_cache(f"properties:{user_id}:*")
    """
    try:
        redis_client = await get_redis()
        keys = []
        async for key in redis_client.scan_iter(match=pattern):
            keys.append(key)

        if keys:
            await redis_client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching {pattern}")
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache: {e}")
