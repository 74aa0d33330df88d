import logging
from typing import Optional

from fastapi import Request
import redis
import redis.exceptions

from shorturls.core.config import Settings

logger = logging.getLogger(__name__)
RATE_LIMIT_KEY_PREFIX = "rate_limit"
EXEMPT_PATHS = ("/health",)


def build_redis_client(settings: Settings) -> redis.Redis:
    pool = redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=50,
        socket_connect_timeout=2,
        socket_keepalive=True,
        retry_on_timeout=True,
    )
    return redis.Redis(connection_pool=pool)


def verify_redis_connection(client: redis.Redis) -> bool:
    try:
        client.ping()
        logger.info("Redis connection verified", extra={"package": "cache"})
        return True
    except redis.exceptions.RedisError as e:
        logger.warning(
            f"Redis connection failed: {e}. Rate limiting will fail open.",
            extra={"package": "cache"},
        )
        return False


def get_client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def is_exempt_path(path: str) -> bool:
    return path in EXEMPT_PATHS


def rate_limit_key(client_ip: str) -> str:
    return f"{RATE_LIMIT_KEY_PREFIX}:{client_ip}"


def check_rate_limit(client: redis.Redis, key: str, limit: int, window: int) -> Optional[bool]:
    """Fixed-window counter. Returns None on any Redis failure (fail open)."""
    try:
        current = client.get(key)
        if current and int(current) >= limit:
            return False  # Limit exceeded

        pipe = client.pipeline()
        pipe.incr(key, 1)
        if not current:
            pipe.expire(key, window)
        pipe.execute()
    except (redis.exceptions.RedisError, ValueError) as e:
        logger.warning(
            f"Redis unavailable ({e}). Rate limiting skipped (fail open).",
            extra={"package": "cache"},
        )
        return None
    return True
