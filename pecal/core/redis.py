"""
Shared Redis client used as the reminder coordination store.

`get_redis()` returns None when Redis is not configured; callers treat that as
"store unavailable" and degrade to a no-op.
"""

import logging
from typing import Optional

import redis

from pecal.core.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis() -> Optional[redis.Redis]:
    global _redis_client
    if _redis_client is not None:
        return _redis_client
    if not settings.REDIS_URL:
        return None
    try:
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
    except ValueError as e:
        logger.warning(f"⚠️ [Redis] Invalid REDIS_URL, coordination store disabled: {e}")
        return None
    logger.info("🔌 [Redis] Client created for coordination store")
    return _redis_client


def set_redis(client: Optional[redis.Redis]) -> None:
    """Replace the process-wide client (worker bootstrap, tests)."""
    global _redis_client
    _redis_client = client


def to_redis_key(raw_key: str) -> str:
    return f"{settings.REDIS_KEY_PREFIX}:{raw_key}"


def create_cache_key(*parts) -> str:
    return ":".join(str(p) for p in parts if p is not None and p != "")
