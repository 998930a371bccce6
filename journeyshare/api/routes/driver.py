"""
Driver endpoints
================

GET  /api/v1/driver/state                   -- current trip and matched trip ids
POST /api/v1/driver/next-state              -- advance the current trip one status
POST /api/v1/driver/trips/{trip_id}/accept  -- wait for a trip to be assigned, then accept it
GET  /api/v1/driver/token                   -- driver JWT from the provider
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from journeyshare.api.dependencies import get_vehicle_controller
from journeyshare.api.schemas import DriverStateResponse, TokenResponse, TripStateResponse
from journeyshare.config import settings
from journeyshare.domain.entities import TripState
from journeyshare.domain.errors import FatalTripError, TripAlreadyFinished
from journeyshare.infrastructure.provider_client import ProviderError
from journeyshare.services.vehicle_controller import VehicleController

router = APIRouter(prefix="/driver", tags=["driver"])


def _to_response(state: TripState) -> TripStateResponse:
    return TripStateResponse(
        trip_id=state.trip_id,
        trip_status=state.trip_status,
        trip_status_code=state.trip_status.code,
        intermediate_destination_index=state.intermediate_destination_index,
    )


@router.get("/state", response_model=DriverStateResponse, summary="Current driver state")
async def get_state(controller: VehicleController = Depends(get_vehicle_controller)):
    return DriverStateResponse(**controller.snapshot())


@router.post(
    "/next-state",
    response_model=TripStateResponse,
    summary="Advance the current trip",
    responses={409: {"description": "No trip in progress."}},
)
async def next_state(controller: VehicleController = Depends(get_vehicle_controller)):
    try:
        state = await controller.process_next_state()
    except FatalTripError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if state is None:
        raise HTTPException(status_code=409, detail="No trip in progress")
    return _to_response(state)


@router.post(
    "/trips/{trip_id}/accept",
    response_model=TripStateResponse,
    summary="Accept a trip once the provider assigns it",
    responses={
        409: {"description": "Trip already finished on this vehicle."},
        504: {"description": "Trip was not assigned in time."},
    },
)
async def accept_trip(
    trip_id: str, controller: VehicleController = Depends(get_vehicle_controller)
):
    try:
        state = await asyncio.wait_for(
            controller.accept_trip(trip_id), timeout=settings.accept_trip_timeout_seconds
        )
    except TripAlreadyFinished as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail=f"Trip {trip_id} was not assigned in time")
    return _to_response(state)


@router.get("/token", response_model=TokenResponse, summary="Fetch a driver token")
async def driver_token(controller: VehicleController = Depends(get_vehicle_controller)):
    try:
        token = await controller.provider.fetch_auth_token(controller.vehicle_id)
    except ProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return TokenResponse(token=token)
