"""Redis connection used by the poller lock and the vehicle id store."""

import redis.asyncio as aioredis

from journeyshare.config import settings


def create_redis(url: str = settings.redis_url) -> aioredis.Redis:
    """Client backed by its own pool; the owner closes it with ``aclose()``."""
    return aioredis.from_url(url, decode_responses=True)
