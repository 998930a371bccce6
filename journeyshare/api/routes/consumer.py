"""
Consumer endpoints
==================

POST   /api/v1/consumer/trips        -- create a trip (202; matching continues in background)
GET    /api/v1/consumer/trip         -- session state and match status
POST   /api/v1/consumer/trip/status  -- trip status reported by the consumer SDK
DELETE /api/v1/consumer/trip         -- stop matching and reset the session
GET    /api/v1/consumer/token        -- consumer JWT for the matched trip
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from journeyshare.api.dependencies import get_consumer_session
from journeyshare.api.schemas import (
    ConsumerSessionResponse,
    ConsumerTripRequest,
    TokenResponse,
    TripStatusUpdate,
)
from journeyshare.domain.entities import Point
from journeyshare.domain.enums import AppState
from journeyshare.infrastructure.provider_client import ProviderError
from journeyshare.services.consumer_session import ConsumerTripSession

router = APIRouter(prefix="/consumer", tags=["consumer"])


@router.post(
    "/trips",
    status_code=202,
    response_model=ConsumerSessionResponse,
    summary="Create a trip",
    responses={
        202: {"description": "Trip created; matching is async."},
        409: {"description": "A trip is already in progress."},
    },
)
async def create_trip(
    body: ConsumerTripRequest,
    session: ConsumerTripSession = Depends(get_consumer_session),
):
    if session.app_state in (AppState.CONFIRMING_TRIP, AppState.JOURNEY_SHARING):
        raise HTTPException(status_code=409, detail="A trip is already in progress")

    await session.cancel()
    session.reset()
    session.set_state(AppState.SELECTING_PICKUP)
    session.update_location_for_state(Point(body.pickup.latitude, body.pickup.longitude))
    session.set_state(AppState.SELECTING_DROPOFF)
    for stop in body.intermediate_destinations:
        session.update_location_for_state(Point(stop.latitude, stop.longitude))
        session.add_intermediate_destination()
    session.update_location_for_state(Point(body.dropoff.latitude, body.dropoff.longitude))

    try:
        await session.start_trip()
    except ProviderError as exc:
        session.reset()
        raise HTTPException(status_code=502, detail=str(exc))
    return ConsumerSessionResponse(**session.snapshot())


@router.get("/trip", response_model=ConsumerSessionResponse, summary="Get session state")
async def get_trip(session: ConsumerTripSession = Depends(get_consumer_session)):
    return ConsumerSessionResponse(**session.snapshot())


@router.post(
    "/trip/status",
    response_model=ConsumerSessionResponse,
    summary="Report a trip status change",
)
async def update_trip_status(
    body: TripStatusUpdate,
    session: ConsumerTripSession = Depends(get_consumer_session),
):
    session.on_trip_status_update(body.status)
    return ConsumerSessionResponse(**session.snapshot())


@router.delete("/trip", response_model=ConsumerSessionResponse, summary="Reset the session")
async def reset_trip(session: ConsumerTripSession = Depends(get_consumer_session)):
    await session.cancel()
    session.reset()
    return ConsumerSessionResponse(**session.snapshot())


@router.get(
    "/token",
    response_model=TokenResponse,
    summary="Fetch a consumer token",
    responses={409: {"description": "No matched trip."}},
)
async def consumer_token(session: ConsumerTripSession = Depends(get_consumer_session)):
    if session.trip is None:
        raise HTTPException(status_code=409, detail="No matched trip")
    try:
        token = await session.provider.fetch_auth_token(session.trip.trip_id)
    except ProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return TokenResponse(token=token)
