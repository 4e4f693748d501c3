"""
Политика видимости водителей в снимке.

Чистые функции без ввода-вывода: их применяют и реестр на сервере,
и опросчик на клиенте, поэтому повторное применение фильтра ничего не меняет.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from maasin_go.common.constants import DriverStatus, VehicleFilter
from maasin_go.common.errors import ValidationError
from maasin_go.shared.models.common import parse_payload
from maasin_go.shared.models.driver_dto import DriverRecord, DriverStatusUpdate


def parse_vehicle_filter(value: VehicleFilter | str | None) -> VehicleFilter:
    """Приводит фильтр к перечислению. None и пустая строка означают `all`."""
    if value is None or value == "":
        return VehicleFilter.ALL
    try:
        return VehicleFilter(value)
    except ValueError:
        allowed = ", ".join(f.value for f in VehicleFilter)
        raise ValidationError(f"Unknown vehicleType filter '{value}'. Allowed: {allowed}")


def parse_status_update(data: DriverStatusUpdate | Mapping[str, Any]) -> DriverStatusUpdate:
    """Проверяет тело публикации; неизвестные статусы и типы транспорта отклоняются."""
    return parse_payload(DriverStatusUpdate, data, "driver status update")


def is_active_status(status: Any) -> bool:
    """Статус попадает в снимок: задан и не `offline`."""
    if status is None or status == "":
        return False
    return status != DriverStatus.OFFLINE


def matches_vehicle(record: DriverRecord, vehicle_filter: VehicleFilter) -> bool:
    if vehicle_filter == VehicleFilter.ALL:
        return True
    return record.vehicle_type.value == vehicle_filter.value


def filter_visible(
    records: Iterable[DriverRecord],
    vehicle_filter: VehicleFilter | str | None = VehicleFilter.ALL,
) -> list[DriverRecord]:
    """
    Оставляет активных водителей нужного типа транспорта.
    Порядок входной последовательности сохраняется.
    """
    selected = parse_vehicle_filter(vehicle_filter)
    return [
        record
        for record in records
        if is_active_status(record.status) and matches_vehicle(record, selected)
    ]
