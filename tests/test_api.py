"""
Integration tests for the control API.

The lifespan hook is not run: the controller and the consumer session are
built over a mocked provider client and placed on ``app.state`` directly.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from journeyshare.api.app import create_app
from journeyshare.config import settings
from journeyshare.domain.entities import TripState
from journeyshare.domain.enums import AppState, TripStatus
from journeyshare.infrastructure.provider_client import ProviderError
from journeyshare.infrastructure.provider_schemas import GetTripResponse, TokenResponse, TripResponse
from journeyshare.services.consumer_provider import ConsumerProviderService
from journeyshare.services.consumer_session import ConsumerTripSession
from journeyshare.services.driver_provider import DriverProviderService
from journeyshare.services.vehicle_controller import VehicleController
from tests.conftest import DROP_OFF, PICKUP, make_trip_response, make_vehicle

TRIP_BODY = {
    "pickup": {"latitude": 37.42, "longitude": -122.08},
    "dropoff": {"latitude": 37.39, "longitude": -122.03},
    "intermediate_destinations": [{"latitude": 37.40, "longitude": -122.05}],
}


@pytest.fixture
def app(mock_client):
    app = create_app()
    app.state.vehicle_controller = VehicleController(
        DriverProviderService(mock_client, poll_interval_seconds=0), "Vehicle_1"
    )
    session = ConsumerTripSession(
        ConsumerProviderService(mock_client, poll_interval_seconds=0),
        idle_reset_delay_seconds=0,
    )
    session.initialize()
    app.state.consumer_session = session
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestDriverRoutes:
    @pytest.mark.asyncio
    async def test_state_without_trip(self, client):
        resp = await client.get("/api/v1/driver/state")
        assert resp.status_code == 200
        body = resp.json()
        assert body["vehicle_id"] == "Vehicle_1"
        assert body["trip_id"] is None
        assert body["trip_status"] == "UNKNOWN_TRIP_STATUS"

    @pytest.mark.asyncio
    async def test_next_state_without_trip_conflicts(self, client):
        resp = await client.post("/api/v1/driver/next-state")
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_next_state_advances_current_trip(self, app, client):
        controller = app.state.vehicle_controller
        await controller.on_vehicle_state_update(make_vehicle(("t1", PICKUP), ("t1", DROP_OFF)))

        resp = await client.post("/api/v1/driver/next-state")

        assert resp.status_code == 200
        assert resp.json() == {
            "trip_id": "t1",
            "trip_status": "ENROUTE_TO_PICKUP",
            "trip_status_code": 2,
            "intermediate_destination_index": -1,
        }
        state = (await client.get("/api/v1/driver/state")).json()
        assert state["trip_status"] == "ENROUTE_TO_PICKUP"
        assert state["matched_trip_ids"] == ["t1"]

    @pytest.mark.asyncio
    async def test_fatal_error_is_unprocessable(self, app, client):
        controller = app.state.vehicle_controller
        await controller.on_vehicle_state_update(make_vehicle(("t1", PICKUP)))
        controller.trip_states["t1"] = TripState("t1", TripStatus.ARRIVED_AT_PICKUP)

        resp = await client.post("/api/v1/driver/next-state")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_accept_trip(self, mock_client, client):
        mock_client.get_trip = AsyncMock(return_value=make_trip_response("t9"))

        resp = await client.post("/api/v1/driver/trips/t9/accept")

        assert resp.status_code == 200
        assert resp.json()["trip_status"] == "NEW"

    @pytest.mark.asyncio
    async def test_accept_trip_times_out(self, mock_client, client, monkeypatch):
        monkeypatch.setattr(settings, "accept_trip_timeout_seconds", 0.05)
        mock_client.get_trip = AsyncMock(return_value=GetTripResponse())

        resp = await client.post("/api/v1/driver/trips/t9/accept")

        assert resp.status_code == 504

    @pytest.mark.asyncio
    async def test_accept_finished_trip_conflicts(self, app, mock_client, client):
        app.state.vehicle_controller.finished_trip_ids.add("t9")
        mock_client.get_trip = AsyncMock(return_value=make_trip_response("t9"))

        resp = await client.post("/api/v1/driver/trips/t9/accept")

        assert resp.status_code == 409
        mock_client.update_trip.assert_not_called()

    @pytest.mark.asyncio
    async def test_driver_token(self, mock_client, client):
        mock_client.get_driver_token = AsyncMock(return_value=TokenResponse(jwt="driver-jwt"))
        resp = await client.get("/api/v1/driver/token")
        assert resp.json() == {"token": "driver-jwt"}
        mock_client.get_driver_token.assert_awaited_once_with("Vehicle_1")


class TestConsumerRoutes:
    @pytest.fixture(autouse=True)
    def _provider(self, mock_client):
        mock_client.create_trip = AsyncMock(
            return_value=TripResponse(name="providers/test-project/trips/t1", trip_status="NEW")
        )
        mock_client.get_trip = AsyncMock(return_value=make_trip_response("t1", vehicle_id="V1"))

    @pytest.mark.asyncio
    async def test_create_trip_is_accepted(self, app, client):
        resp = await client.post("/api/v1/consumer/trips", json=TRIP_BODY)

        assert resp.status_code == 202
        assert resp.json()["trip_name"] == "providers/test-project/trips/t1"

        session = app.state.consumer_session
        await session.matching_task
        body = (await client.get("/api/v1/consumer/trip")).json()
        assert body["app_state"] == "JOURNEY_SHARING"
        assert body["vehicle_id"] == "V1"
        assert body["is_trip_matched"] is True
        assert body["intermediate_destinations"] == 1

    @pytest.mark.asyncio
    async def test_second_trip_conflicts(self, app, client):
        app.state.consumer_session.set_state(AppState.CONFIRMING_TRIP)
        resp = await client.post("/api/v1/consumer/trips", json=TRIP_BODY)
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_coordinates_rejected(self, client):
        body = dict(TRIP_BODY, pickup={"latitude": 123.0, "longitude": 0.0})
        resp = await client.post("/api/v1/consumer/trips", json=body)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_status_update_and_reset(self, app, client):
        await client.post("/api/v1/consumer/trips", json=TRIP_BODY)
        await app.state.consumer_session.matching_task

        resp = await client.post("/api/v1/consumer/trip/status", json={"status": "CANCELED"})
        assert resp.json()["app_state"] == "TRIP_CANCELED"

        resp = await client.delete("/api/v1/consumer/trip")
        assert resp.json()["app_state"] == "INITIALIZED"

    @pytest.mark.asyncio
    async def test_token_requires_match(self, client):
        resp = await client.get("/api/v1/consumer/token")
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_token_for_matched_trip(self, app, mock_client, client):
        mock_client.get_consumer_token = AsyncMock(return_value=TokenResponse(jwt="rider-jwt"))
        await client.post("/api/v1/consumer/trips", json=TRIP_BODY)
        await app.state.consumer_session.matching_task

        resp = await client.get("/api/v1/consumer/token")

        assert resp.json() == {"token": "rider-jwt"}
        mock_client.get_consumer_token.assert_awaited_once_with("t1")

    @pytest.mark.asyncio
    async def test_provider_failure_is_bad_gateway(self, app, mock_client, client):
        mock_client.create_trip = AsyncMock(side_effect=ProviderError("down", 503))

        resp = await client.post("/api/v1/consumer/trips", json=TRIP_BODY)

        assert resp.status_code == 502
        session = app.state.consumer_session
        assert session.app_state is AppState.INITIALIZED
        assert session.intermediate_destinations == []

    @pytest.mark.asyncio
    async def test_trip_after_reset_starts_clean(self, app, mock_client, client):
        await client.post("/api/v1/consumer/trips", json=TRIP_BODY)
        await client.delete("/api/v1/consumer/trip")

        resp = await client.post("/api/v1/consumer/trips", json=TRIP_BODY)

        assert resp.status_code == 202
        assert resp.json()["intermediate_destinations"] == 1
        body = mock_client.create_trip.call_args.args[0]
        assert len(body.intermediate_destinations) == 1
        await app.state.consumer_session.matching_task
