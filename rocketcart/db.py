"""
Redis Client - Upstash

Provides a singleton async Upstash Redis client used by the
Redis-backed cart storage slot.
"""

from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from rocketcart import config


# Singleton instance
_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        url = config.upstash_redis_rest_url()
        token = config.upstash_redis_rest_token()
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(url=url, token=token)

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    # Cart slot: cart:{storage_key}
    CART = "cart:"

    @staticmethod
    def cart_key(storage_key: str) -> str:
        return f"{RedisKeys.CART}{storage_key}"
