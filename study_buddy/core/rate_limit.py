from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
from study_buddy.core.config import settings
from study_buddy.core.errors import RateLimited
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.core.rate_limit")

_redis: Optional[Redis] = None


def get_redis() -> Optional[Redis]:
    """Lazily build the Redis client. None when REDIS_URL is not configured."""
    global _redis
    if _redis is None and settings.REDIS_URL:
        _redis = Redis.from_url(settings.REDIS_URL, decode_responses=True, socket_connect_timeout=1, socket_timeout=1)
        logger.info("Redis client configured for rate limiting")
    return _redis


async def rate_limit(key: str, limit: int = 100, window: int = 60) -> None:
    """
    Fixed-window rate limit on `key`.
    Without Redis (unset or unreachable) this is a no-op (graceful degradation).
    """
    redis = get_redis()
    if redis is None:
        logger.debug("Rate limit check skipped (Redis not configured)", extra={"key": key})
        return

    try:
        redis_key = f"rate:{key}"
        count = await redis.incr(redis_key)
        if count == 1:
            await redis.expire(redis_key, window)
    except RedisError as e:
        # Log error but don't block the request
        logger.error(f"Rate limit check failed: {e}", extra={"key": key})
        return

    if count > limit:
        logger.warning("Rate limit exceeded", extra={"key": key, "count": count, "limit": limit})
        raise RateLimited()
