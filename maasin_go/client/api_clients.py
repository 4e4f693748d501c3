"""
HTTP-клиент API Maasin Go для приложения пассажира и водителя.

Ответы не-2xx превращаются в те же ошибки, что поднимает сервер
(по полю errorCode тела), а сетевые сбои в ServiceUnavailable.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from maasin_go.common.constants import VehicleFilter
from maasin_go.common.errors import (
    ERRORS_BY_CODE,
    CommuteError,
    NotFoundError,
    PermissionDenied,
    ServiceUnavailable,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)
from maasin_go.shared.models.driver_dto import DriverRecord, DriverStatusUpdate
from maasin_go.shared.models.fare_dto import FareCatalog
from maasin_go.shared.models.feedback_dto import FeedbackRecord
from maasin_go.shared.models.user_dto import ProfileDTO, TokenResponse, UserDTO

_ERRORS_BY_STATUS: dict[int, type[CommuteError]] = {
    400: ValidationError,
    401: Unauthenticated,
    403: PermissionDenied,
    404: NotFoundError,
    500: StoreUnavailable,
}


def error_from_response(response: httpx.Response) -> CommuteError:
    """Восстанавливает ошибку приложения из ответа сервера."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or f"HTTP {response.status_code}"
    error_class = ERRORS_BY_CODE.get(body.get("errorCode", ""))
    if error_class is None:
        error_class = _ERRORS_BY_STATUS.get(response.status_code, ServiceUnavailable)
    return error_class(message, details=body.get("details"))


class BaseClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._token: Optional[str] = None

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "BaseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def set_token(self, token: Optional[str]) -> None:
        """Bearer-токен для запросов, требующих аутентификации."""
        self._token = token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        auth: bool = False,
    ) -> Any:
        headers = {}
        if auth:
            if not self._token:
                raise Unauthenticated("Not signed in")
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self.client.request(method, path, params=params, json=json, headers=headers)
        except httpx.TransportError as e:
            raise ServiceUnavailable(f"API unreachable: {e}") from e

        if response.is_error:
            raise error_from_response(response)
        try:
            return response.json()
        except ValueError as e:
            raise ServiceUnavailable("API returned a non-JSON response") from e

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None, auth: bool = False) -> Any:
        return await self._request("GET", path, params=params, auth=auth)

    async def _post(self, path: str, json: Optional[dict[str, Any]] = None, auth: bool = False) -> Any:
        return await self._request("POST", path, json=json, auth=auth)

    async def _put(self, path: str, json: Optional[dict[str, Any]] = None, auth: bool = False) -> Any:
        return await self._request("PUT", path, json=json, auth=auth)


class CommuteApiClient(BaseClient):
    """Все операции HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if base_url is None or timeout is None:
            from maasin_go.config import settings

            base_url = base_url or settings.client.API_BASE_URL
            timeout = timeout or settings.client.REQUEST_TIMEOUT
        super().__init__(base_url, timeout, transport)

    async def signup(self, email: str, password: str, name: str, role: str) -> UserDTO:
        data = await self._post("/signup", json={"email": email, "password": password, "name": name, "role": role})
        return UserDTO.model_validate(data["user"])

    async def login(self, email: str, password: str) -> TokenResponse:
        """Вход; полученный токен запоминается для следующих запросов."""
        data = await self._post("/login", json={"email": email, "password": password})
        token = TokenResponse.model_validate(data)
        self.set_token(token.access_token)
        return token

    async def get_drivers(self, vehicle_type: VehicleFilter | str = VehicleFilter.ALL) -> list[DriverRecord]:
        value = vehicle_type.value if isinstance(vehicle_type, VehicleFilter) else vehicle_type
        params = None if value in ("", VehicleFilter.ALL.value) else {"vehicleType": value}
        data = await self._get("/drivers", params=params)
        return [DriverRecord.model_validate(item) for item in data.get("drivers", [])]

    async def update_driver_status(self, update: DriverStatusUpdate) -> DriverRecord:
        data = await self._post(
            "/driver/update",
            json=update.model_dump(mode="json", by_alias=True, exclude_none=True),
            auth=True,
        )
        return DriverRecord.model_validate(data["driver"])

    async def get_fares(self) -> FareCatalog:
        data = await self._get("/fares")
        return FareCatalog.model_validate(data["fares"])

    async def submit_feedback(
        self,
        rating: int,
        plate_number: Optional[str] = None,
        comment: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> FeedbackRecord:
        payload = {"rating": rating, "plateNumber": plate_number, "comment": comment, "driverId": driver_id}
        data = await self._post(
            "/feedback",
            json={k: v for k, v in payload.items() if v is not None},
            auth=True,
        )
        return FeedbackRecord.model_validate(data["feedback"])

    async def get_profile(self) -> ProfileDTO:
        data = await self._get("/profile", auth=True)
        return ProfileDTO.model_validate(data["profile"])

    async def update_profile(self, **fields: Any) -> ProfileDTO:
        """Поля: name, plate_number, vehicle_type (только переданные)."""
        aliases = {"name": "name", "plate_number": "plateNumber", "vehicle_type": "vehicleType"}
        unknown = set(fields) - set(aliases)
        if unknown:
            raise TypeError(f"Неизвестные поля профиля: {', '.join(sorted(unknown))}")
        data = await self._put("/profile", json={aliases[k]: v for k, v in fields.items()}, auth=True)
        return ProfileDTO.model_validate(data["profile"])
