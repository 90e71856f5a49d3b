"""
utils/cache.py - Redis caching layer for read-heavy lists

Provides a graceful-degradation cache: if Redis is unavailable the app
continues to work normally (every call falls through to the database).
Dashboard snapshots are never cached; they are recomputed per request.

Usage in routes:
    from utils.cache import cache, users_key

    data = cache.get(users_key())
    cache.set(users_key(), data, ttl=60)
    cache.delete(users_key())
    cache.delete_pattern("notifications:ali:*")
"""

import json
import logging
import time
from typing import Optional, Any

import redis
from config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------


def users_key() -> str:
    return "users:list"


def notifications_key(username: str, suffix: str = "list") -> str:
    return f"notifications:{username}:{suffix}"


# ---------------------------------------------------------------------------
# Redis connection (singleton with retry cooldown)
# ---------------------------------------------------------------------------

_redis_client: Optional[redis.Redis] = None
_redis_last_fail: float = 0.0       # epoch of last connection failure
_REDIS_RETRY_INTERVAL = 60.0        # seconds before retrying after a failure
_redis_warned: bool = False          # only warn once per cooldown period


def _get_redis() -> Optional[redis.Redis]:
    """Return a Redis client, or None if Redis is disabled / unreachable."""
    global _redis_client, _redis_last_fail, _redis_warned

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is not None:
        return _redis_client

    now = time.time()
    if now - _redis_last_fail < _REDIS_RETRY_INTERVAL:
        return None

    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=2,
            retry_on_timeout=True,
        )
        client.ping()
        _redis_client = client
        logger.info("✅ Redis connected successfully")
        _redis_warned = False
        return _redis_client
    except Exception as e:
        _redis_last_fail = now
        _redis_client = None
        if not _redis_warned:
            logger.warning(f"⚠️ Redis unavailable – running without cache: {e}")
            _redis_warned = True
        return None


# ---------------------------------------------------------------------------
# Public cache API
# ---------------------------------------------------------------------------

class Cache:
    """JSON values in Redis; every failure reads as a miss."""

    def get(self, key: str) -> Optional[Any]:
        r = _get_redis()
        if r is None:
            return None
        try:
            raw = r.get(key)
            return None if raw is None else json.loads(raw)
        except Exception as e:
            logger.debug(f"Cache GET error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 30) -> bool:
        r = _get_redis()
        if r is None:
            return False
        try:
            r.setex(key, ttl, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.debug(f"Cache SET error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        r = _get_redis()
        if r is None:
            return False
        try:
            r.delete(key)
            return True
        except Exception as e:
            logger.debug(f"Cache DELETE error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Remove all keys matching a glob pattern using SCAN. Returns the count."""
        r = _get_redis()
        if r is None:
            return 0
        try:
            deleted = 0
            for key in r.scan_iter(match=pattern, count=100):
                deleted += r.delete(key)
            return deleted
        except Exception as e:
            logger.debug(f"Cache DELETE_PATTERN error for {pattern}: {e}")
            return 0

    @property
    def enabled(self) -> bool:
        return settings.REDIS_ENABLED and _get_redis() is not None


# Module-level singleton – import this everywhere
cache = Cache()
