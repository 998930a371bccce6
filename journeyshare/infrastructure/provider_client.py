"""
Async REST client for the local sample provider.

Default base URL: ``http://localhost:8888/``.  Every non-2xx response and
every transport failure surfaces as ``ProviderError`` so the polling layer
can treat them uniformly as transient.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from journeyshare.config import settings

from .provider_schemas import (
    CreateVehicleBody,
    GetTripResponse,
    TokenResponse,
    TripResponse,
    TripUpdateBody,
    VehicleModel,
    WaypointData,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ProviderError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderClient:
    def __init__(
        self,
        base_url: str = settings.provider_base_url,
        timeout: float = settings.provider_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # ── Vehicles ──────────────────────────────────────────────────

    async def get_vehicle(self, vehicle_id: str) -> VehicleModel:
        return await self._request("GET", f"vehicle/{vehicle_id}", VehicleModel)

    async def create_vehicle(self, body: CreateVehicleBody) -> VehicleModel:
        return await self._request("POST", "vehicle/new", VehicleModel, body=body)

    # ── Tokens ────────────────────────────────────────────────────

    async def get_driver_token(self, vehicle_id: str) -> TokenResponse:
        return await self._request("GET", f"token/driver/{vehicle_id}", TokenResponse)

    async def get_consumer_token(self, trip_id: str) -> TokenResponse:
        return await self._request("GET", f"token/consumer/{trip_id}", TokenResponse)

    # ── Trips ─────────────────────────────────────────────────────

    async def get_trip(self, trip_id: str) -> GetTripResponse:
        return await self._request("GET", f"trip/{trip_id}", GetTripResponse)

    async def create_trip(self, waypoints: WaypointData) -> TripResponse:
        return await self._request("POST", "trip/new", TripResponse, body=waypoints)

    async def update_trip(self, trip_id: str, body: TripUpdateBody) -> TripResponse:
        return await self._request("PUT", f"trip/{trip_id}", TripResponse, body=body)

    # ── Internals ─────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        response_model: Type[M],
        body: Optional[BaseModel] = None,
    ) -> M:
        payload: Any = None
        if body is not None:
            payload = body.model_dump(by_alias=True, exclude_none=True)

        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            raise ProviderError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("%s %s -> %d", method, path, response.status_code)
        try:
            return response_model.model_validate(response.json())
        except ValueError as exc:
            raise ProviderError(f"{method} {path} returned an invalid payload") from exc
