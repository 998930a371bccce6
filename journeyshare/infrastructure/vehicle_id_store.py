"""Persists the driver's vehicle id across restarts."""

from __future__ import annotations

import redis.asyncio as aioredis

from journeyshare.config import settings

VEHICLE_ID_KEY = "vehicle_id"


class VehicleIdStore:
    def __init__(self, client: aioredis.Redis, default: str = settings.default_vehicle_id):
        self.redis = client
        self.default = default

    async def read_or_default(self) -> str:
        stored = await self.redis.get(VEHICLE_ID_KEY)
        return stored or self.default

    async def save(self, vehicle_id: str) -> None:
        await self.redis.set(VEHICLE_ID_KEY, vehicle_id)
