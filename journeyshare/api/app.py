"""
FastAPI application factory.

* Registers the driver and consumer control routes.
* On startup registers the vehicle with the provider and starts the vehicle
  state poller; on shutdown stops it and closes the provider client.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from journeyshare.api.routes import consumer, driver
from journeyshare.api.schemas import HealthResponse
from journeyshare.config import settings
from journeyshare.domain.entities import extract_vehicle_id
from journeyshare.infrastructure.locks import DistributedLock
from journeyshare.infrastructure.provider_client import ProviderClient
from journeyshare.infrastructure.redis_client import create_redis
from journeyshare.infrastructure.vehicle_id_store import VehicleIdStore
from journeyshare.services.consumer_provider import ConsumerProviderService
from journeyshare.services.consumer_session import ConsumerTripSession
from journeyshare.services.driver_provider import DriverProviderService
from journeyshare.services.vehicle_controller import VehicleController
from journeyshare.workers.vehicle_poller import VehicleStatePoller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the driver and consumer sides; start the poller on startup."""
    client = ProviderClient()
    redis = create_redis()

    driver_provider = DriverProviderService(client)
    store = VehicleIdStore(redis)
    vehicle = await driver_provider.register_vehicle(await store.read_or_default())
    vehicle_id = extract_vehicle_id(vehicle.name) if vehicle.name else store.default
    await store.save(vehicle_id)
    logger.info("Registered vehicle %s", vehicle_id)

    controller = VehicleController(driver_provider, vehicle_id)
    poller = VehicleStatePoller(
        driver_provider,
        vehicle_id,
        controller.on_vehicle_state_update,
        DistributedLock(redis, f"vehicle_poller:{vehicle_id}", settings.poller_lock_ttl_seconds),
    )
    session = ConsumerTripSession(ConsumerProviderService(client))
    session.initialize()

    app.state.vehicle_controller = controller
    app.state.vehicle_poller = poller
    app.state.consumer_session = session

    await poller.start()
    yield
    await poller.stop()
    await session.cancel()
    await client.aclose()
    await redis.aclose()


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Journey Sharing Sample Backend",
        description=(
            "Drives a sample vehicle through its trips, including back-to-back "
            "trips, and creates consumer trips against the local sample provider."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Routers
    app.include_router(driver.router, prefix="/api/v1")
    app.include_router(consumer.router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        return HealthResponse()

    return app
