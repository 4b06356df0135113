"""Redis connection utilities."""

from functools import lru_cache

from redis import ConnectionPool, Redis
from redis.exceptions import RedisError

from api.config import get_settings

# Queue names
QUEUE_HIGH = "thememetrics-high"
QUEUE_DEFAULT = "thememetrics-default"
QUEUE_LOW = "thememetrics-low"
ALL_QUEUES = [QUEUE_HIGH, QUEUE_DEFAULT, QUEUE_LOW]

# Job result TTL (7 days)
JOB_RESULT_TTL = 60 * 60 * 24 * 7


@lru_cache
def _get_redis_pool_bytes() -> ConnectionPool:
    """Cached pool without decode_responses (RQ stores pickled payloads)."""
    settings = get_settings()
    return ConnectionPool.from_url(
        str(settings.redis_url),
        decode_responses=False,
        max_connections=10,
    )


def get_redis_connection_bytes() -> Redis:
    """Get a Redis connection for RQ."""
    return Redis(connection_pool=_get_redis_pool_bytes())


def ping_redis() -> bool:
    """Check that Redis answers; False on any connection problem."""
    try:
        return bool(get_redis_connection_bytes().ping())
    except RedisError:
        return False
