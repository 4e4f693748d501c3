# tests/client/test_api_clients.py
"""
Тесты HTTP-клиента поверх httpx.MockTransport.
"""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from maasin_go.client.api_clients import CommuteApiClient, error_from_response
from maasin_go.common.constants import DriverStatus, VehicleFilter
from maasin_go.common.errors import (
    NotFoundError,
    PermissionDenied,
    ServiceUnavailable,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)
from maasin_go.shared.models.driver_dto import DriverStatusUpdate

BASE_URL = "http://api.test"

DRIVER = {
    "driverId": "driver-1",
    "displayName": "Juan",
    "status": "available",
    "route": "Poblacion to Combado",
    "capacity": "2",
    "location": {"latitude": 10.1328, "longitude": 124.8422},
    "vehicleType": "tricycle",
    "plateNumber": "TRC-001",
    "lastUpdatedAt": "2024-06-01T08:00:00Z",
}

USER = {"id": "driver-1", "email": "juan@example.com", "name": "Juan", "role": "driver"}


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> CommuteApiClient:
    return CommuteApiClient(BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestErrorFromResponse:
    """Восстановление ошибок из ответа."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("unauthenticated", Unauthenticated),
            ("permission_denied", PermissionDenied),
            ("validation_error", ValidationError),
            ("not_found", NotFoundError),
            ("store_unavailable", StoreUnavailable),
        ],
    )
    def test_by_error_code(self, code, expected) -> None:
        response = httpx.Response(418, json={"error": "boom", "errorCode": code})

        error = error_from_response(response)

        assert type(error) is expected
        assert error.message == "boom"

    def test_details_preserved(self) -> None:
        response = httpx.Response(
            400,
            json={"error": "Missing required fields", "errorCode": "validation_error", "details": {"fields": ["name"]}},
        )

        assert error_from_response(response).details == {"fields": ["name"]}

    @pytest.mark.parametrize(
        "status, expected",
        [(400, ValidationError), (401, Unauthenticated), (404, NotFoundError), (502, ServiceUnavailable)],
    )
    def test_by_status(self, status, expected) -> None:
        error = error_from_response(httpx.Response(status, text="<html>gateway</html>"))

        assert type(error) is expected
        assert error.message == f"HTTP {status}"


class TestCommuteApiClient:
    """Операции клиента."""

    @pytest.mark.asyncio
    async def test_get_drivers_without_filter(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"drivers": [DRIVER]})

        async with make_client(handler) as client:
            drivers = await client.get_drivers()

        assert drivers[0].driver_id == "driver-1"
        assert drivers[0].status == DriverStatus.AVAILABLE
        assert seen[0].url.path == "/drivers"
        assert seen[0].url.params == httpx.QueryParams()
        assert "authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_get_drivers_with_filter(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"drivers": []})

        async with make_client(handler) as client:
            assert await client.get_drivers(VehicleFilter.MULTICAB) == []

        assert seen[0].url.params["vehicleType"] == "multicab"

    @pytest.mark.asyncio
    async def test_login_stores_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/login":
                return httpx.Response(200, json={"accessToken": "tok", "tokenType": "bearer", "user": USER})
            return httpx.Response(200, json={"success": True, "driver": DRIVER})

        async with make_client(handler) as client:
            token = await client.login("juan@example.com", "secret1")
            driver = await client.update_driver_status(DriverStatusUpdate(status=DriverStatus.AVAILABLE))

        assert token.access_token == "tok"
        assert driver.plate_number == "TRC-001"
        assert seen[1].headers["authorization"] == "Bearer tok"
        assert json.loads(seen[1].content) == {
            "status": "available",
            "route": "",
            "capacity": "",
            "vehicleType": "tricycle",
            "plateNumber": "",
        }

    @pytest.mark.asyncio
    async def test_auth_required_without_token(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request must not be sent")

        async with make_client(handler) as client:
            with pytest.raises(Unauthenticated, match="Not signed in"):
                await client.get_profile()

    @pytest.mark.asyncio
    async def test_server_error_is_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": "Only drivers can publish status", "errorCode": "permission_denied"})

        async with make_client(handler) as client:
            client.set_token("passenger-token")
            with pytest.raises(PermissionDenied, match="Only drivers"):
                await client.update_driver_status(DriverStatusUpdate(status=DriverStatus.OFFLINE))

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailable):
                await client.get_fares()

    @pytest.mark.asyncio
    async def test_non_json_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="ok")

        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailable):
                await client.get_fares()

    @pytest.mark.asyncio
    async def test_submit_feedback_drops_empty_fields(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "feedback": {
                        "id": "feedback:1717228800000_passenger-1",
                        "passengerId": "passenger-1",
                        "rating": 4,
                        "createdAt": "2024-06-01T08:00:00Z",
                    },
                },
            )

        async with make_client(handler) as client:
            client.set_token("tok")
            record = await client.submit_feedback(4, plate_number="TRC-001")

        assert record.rating == 4
        assert json.loads(seen[0].content) == {"rating": 4, "plateNumber": "TRC-001"}

    @pytest.mark.asyncio
    async def test_update_profile(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "profile": {**USER, "plateNumber": "MCB-7"}})

        async with make_client(handler) as client:
            client.set_token("tok")
            profile = await client.update_profile(plate_number="MCB-7")
            with pytest.raises(TypeError):
                await client.update_profile(role="passenger")

        assert profile.plate_number == "MCB-7"
        assert seen[0].method == "PUT"
        assert json.loads(seen[0].content) == {"plateNumber": "MCB-7"}
        assert len(seen) == 1
