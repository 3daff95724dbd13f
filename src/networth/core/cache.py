"""HTTP caching for Yahoo Finance quote traffic using requests-cache and Redis."""

import logging
from datetime import timedelta
from typing import Any

import requests_cache
from redis import Redis
from redis.exceptions import RedisError
from requests_cache.backends.redis import RedisCache

from networth.core.config import settings

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "networth-quotes"

# Cache expiration times based on data type
CACHE_EXPIRATION = {
    # Quotes feed the refresh button, keep them fresh
    "quote": timedelta(minutes=15),
    # Symbol search and company metadata change rarely
    "search": timedelta(hours=6),
    "default": timedelta(hours=1),
}

URLS_EXPIRE_AFTER = {
    "*/v8/finance/chart/*": CACHE_EXPIRATION["quote"],
    "*/v7/finance/quote*": CACHE_EXPIRATION["quote"],
    "*/v1/finance/search*": CACHE_EXPIRATION["search"],
    "*/v10/finance/quoteSummary/*": CACHE_EXPIRATION["search"],
    "*query*.finance.yahoo.com*": CACHE_EXPIRATION["default"],
}


def get_redis_connection() -> "Redis[Any] | None":
    """
    Get a Redis connection for the HTTP cache.

    Returns:
        Redis client instance or None if Redis is unreachable, in which case
        the application runs without caching.
    """
    try:
        redis_client: Redis[Any] = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=False,  # requests-cache stores binary responses
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        redis_client.ping()
        logger.info(f"Connected to Redis at {settings.REDIS_URL}")
        return redis_client
    except RedisError as e:
        logger.warning(f"Failed to connect to Redis: {e}. Quote caching disabled.")
        return None
    except Exception as e:
        logger.error(f"Unexpected error connecting to Redis: {e}. Quote caching disabled.")
        return None


def configure_quote_cache() -> None:
    """
    Install requests-cache for Yahoo Finance traffic with a Redis backend.

    Called once during application startup. If Redis is unavailable the
    cache is simply not installed.
    """
    redis_conn = get_redis_connection()

    if redis_conn is None:
        logger.warning("Skipping quote cache configuration - Redis unavailable")
        return

    try:
        backend = RedisCache(namespace=CACHE_NAMESPACE, connection=redis_conn)

        requests_cache.install_cache(
            backend=backend,
            urls_expire_after=URLS_EXPIRE_AFTER,
            allowable_methods=("GET",),
            stale_if_error=True,  # Serve stale quotes when Yahoo is down
        )

        logger.info(
            f"Configured quote cache (quotes: {CACHE_EXPIRATION['quote']}, "
            f"search: {CACHE_EXPIRATION['search']}, default: {CACHE_EXPIRATION['default']})"
        )

    except Exception as e:
        logger.error(f"Failed to configure quote cache: {e}")
        logger.warning("Continuing without caching")


def clear_quote_cache() -> bool:
    """
    Drop every cached Yahoo Finance response.

    Used by the bulk "refresh all data" step so the next quote requests hit
    the network.

    Returns:
        True if a cache was active and cleared, False otherwise
    """
    try:
        cache = requests_cache.get_cache()
        if cache is None:
            logger.debug("No active quote cache to clear")
            return False
        cache.clear()
        logger.info("Cleared all cached quote responses")
        return True
    except Exception as e:
        logger.error(f"Failed to clear quote cache: {e}")
        return False


def get_cache_stats() -> dict[str, Any]:
    """
    Get cache statistics.

    Returns:
        Dictionary with ``enabled``, ``backend`` and ``size`` (when the
        backend can report it).
    """
    try:
        cache = requests_cache.get_cache()
        if cache is None:
            return {"enabled": False}

        stats: dict[str, Any] = {
            "enabled": True,
            "backend": type(cache).__name__,
        }

        try:
            stats["size"] = len(cache.responses)
        except Exception:
            stats["size"] = "unavailable"

        return stats
    except Exception as e:
        logger.error(f"Failed to get cache stats: {e}")
        return {"enabled": False, "error": str(e)}
