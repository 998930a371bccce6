"""
Background Vehicle State Poller
===============================

Fetches the vehicle from the provider every ``VEHICLE_POLL_INTERVAL_SECONDS``
(default 10 s, measured from the end of the previous pass) and hands the
result to a listener, normally the ``VehicleController``.

Concurrency safety
------------------
* A **Redis distributed lock** keyed on the vehicle id ensures a single
  process polls (and therefore drives) a given vehicle.  The lock TTL is
  refreshed on every pass.
* Passes never overlap: the next fetch is only scheduled once the listener
  has finished with the previous one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from journeyshare.config import settings
from journeyshare.infrastructure.locks import DistributedLock
from journeyshare.infrastructure.provider_schemas import VehicleModel
from journeyshare.services.driver_provider import DriverProviderService

logger = logging.getLogger(__name__)

VehicleListener = Callable[[VehicleModel], Awaitable[None]]


class VehicleStatePoller:
    def __init__(
        self,
        provider: DriverProviderService,
        vehicle_id: str,
        listener: VehicleListener,
        lock: DistributedLock,
        interval_seconds: float = settings.vehicle_poll_interval_seconds,
    ):
        self.provider = provider
        self.vehicle_id = vehicle_id
        self.listener = listener
        self.lock = lock
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ── Public API ────────────────────────────────────────────────

    async def start(self) -> bool:
        """Start polling.  Returns False if another process owns the vehicle."""
        if self.is_running:
            return True
        if not await self.lock.acquire():
            logger.warning("Vehicle %s is polled by another worker", self.vehicle_id)
            return False
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Vehicle poller started for %s (interval=%.1fs)",
            self.vehicle_id,
            self.interval_seconds,
        )
        return True

    async def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            await self.lock.release()
        logger.info("Vehicle poller stopped for %s", self.vehicle_id)

    async def run_once(self) -> Optional[VehicleModel]:
        """Execute one polling pass.  Returns the fetched vehicle."""
        vehicle = await self.provider.fetch_vehicle(self.vehicle_id)
        await self.listener(vehicle)
        return vehicle

    # ── Internals ─────────────────────────────────────────────────

    async def _loop(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                if not await self.lock.extend():
                    logger.error("Lost poller lock for vehicle %s", self.vehicle_id)
                    break
                await self.run_once()
            except Exception:
                logger.exception("Unhandled error polling vehicle %s", self.vehicle_id)
            # Wait for the interval or until stop is signalled
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.interval_seconds
                )
                break
            except asyncio.TimeoutError:
                pass  # next pass
