"""
Модели реестра присутствия водителей.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from maasin_go.common.constants import DriverStatus, VehicleType
from maasin_go.shared.models.common import CamelModel


class LocationDTO(CamelModel):
    """Координаты в градусах."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class DriverStatusUpdate(CamelModel):
    """
    Тело публикации статуса водителя (POST /driver/update).

    Поля, не переданные клиентом, получают значения по умолчанию;
    координаты по умолчанию подставляет реестр (центр города).
    Любые лишние поля (driverId, lastUpdatedAt и т.п.) игнорируются.
    """

    status: DriverStatus
    route: str = ""
    capacity: str = ""
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    vehicle_type: VehicleType = VehicleType.TRICYCLE
    plate_number: str = ""

    @field_validator("route", "capacity", "plate_number", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        """null от клиента считается пустой строкой."""
        return "" if v is None else v

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def default_vehicle_type(cls, v: str | None) -> str:
        """Пустой тип транспорта: трицикл, как на экране водителя."""
        return VehicleType.TRICYCLE.value if v in (None, "") else v


class DriverRecord(CamelModel):
    """Последняя опубликованная запись водителя."""

    model_config = ConfigDict(frozen=True)

    driver_id: str
    display_name: str
    status: DriverStatus
    route: str = ""
    capacity: str = ""
    location: LocationDTO
    vehicle_type: VehicleType
    plate_number: str = ""
    last_updated_at: datetime


class PublishResponse(CamelModel):
    """Ответ на публикацию статуса."""

    success: bool = True
    driver: DriverRecord


class SnapshotResponse(CamelModel):
    """Снимок активных водителей."""

    drivers: list[DriverRecord]
