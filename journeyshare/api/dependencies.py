"""FastAPI dependency helpers.  Long-lived objects live on ``app.state``."""

from fastapi import Request

from journeyshare.services.consumer_session import ConsumerTripSession
from journeyshare.services.vehicle_controller import VehicleController


def get_vehicle_controller(request: Request) -> VehicleController:
    return request.app.state.vehicle_controller


def get_consumer_session(request: Request) -> ConsumerTripSession:
    return request.app.state.consumer_session
