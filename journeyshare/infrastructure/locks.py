"""
Redis-based distributed lock.

Held by the vehicle state poller so that a single process drives a given
vehicle, no matter how many API workers are running.

SET NX EX on acquire; a Lua check-and-delete on release so a lock that
expired and was re-taken by someone else is never deleted.  ``extend``
refreshes the TTL for long-running holders.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

_EXTEND_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("expire", KEYS[1], ARGV[2])
else
    return 0
end
"""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def extend(self) -> bool:
        """Reset the TTL if we still own the lock."""
        return bool(
            await self.redis.eval(_EXTEND_SCRIPT, 1, self.key, self.token, self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

