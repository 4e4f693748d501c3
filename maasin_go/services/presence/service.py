"""
Реестр присутствия водителей.

Единственный источник истины о том, где сейчас каждый активный водитель.
Модель last-write-wins: публикация полностью заменяет запись водителя,
записи не истекают и не удаляются, `offline` лишь скрывает водителя из снимка.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from pydantic import ValidationError as PydanticValidationError

from maasin_go.common.constants import TypeMsg, UserRole, VehicleFilter
from maasin_go.common.errors import PermissionDenied, Unauthenticated
from maasin_go.common.logger import log_info, log_warning
from maasin_go.services.presence.policy import (
    filter_visible,
    is_active_status,
    parse_status_update,
    parse_vehicle_filter,
)
from maasin_go.services.presence.repository import DriverRepository
from maasin_go.shared.models.driver_dto import DriverRecord, DriverStatusUpdate, LocationDTO
from maasin_go.shared.models.user_dto import Identity


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PresenceRegistry:
    """
    Публикация и снимок записей водителей.

    Ответственности:
    - проверка роли публикующего и формы записи
    - простановка lastUpdatedAt серверным временем
    - фильтрация снимка (offline, пустой статус, тип транспорта)
    - ограничение размера снимка
    """

    def __init__(
        self,
        repository: DriverRepository,
        *,
        default_location: tuple[float, float] = (10.1328, 124.8422),
        snapshot_limit: int = 500,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.default_location = default_location
        self.snapshot_limit = snapshot_limit
        self._clock = clock

    async def publish(
        self,
        identity: Identity | None,
        update: DriverStatusUpdate | Mapping[str, Any],
        display_name: str | None = None,
    ) -> DriverRecord:
        """
        Опубликовать статус водителя.

        Args:
            identity: Проверенная личность вызывающего
            update: Статус, маршрут, вместимость, координаты, транспорт, номер
            display_name: Имя из профиля (если None: имя из токена)

        Returns:
            Сохранённая запись

        Raises:
            Unauthenticated: нет личности
            PermissionDenied: роль не `driver`
            ValidationError: неизвестный статус или тип транспорта
            StoreUnavailable: сбой хранилища
        """
        if identity is None:
            raise Unauthenticated("Unauthorized")
        if identity.role != UserRole.DRIVER:
            raise PermissionDenied("Only drivers can publish status")

        update = parse_status_update(update)
        driver_id = identity.user_id

        # lastUpdatedAt не убывает, даже если часы сервера отстали
        now = self._clock()
        previous = await self.repository.get(driver_id)
        if previous is not None and previous.last_updated_at > now:
            now = previous.last_updated_at

        latitude, longitude = self.default_location
        record = DriverRecord(
            driver_id=driver_id,
            display_name=display_name or identity.name or "Unknown",
            status=update.status,
            route=update.route,
            capacity=update.capacity,
            location=LocationDTO(
                latitude=latitude if update.latitude is None else update.latitude,
                longitude=longitude if update.longitude is None else update.longitude,
            ),
            vehicle_type=update.vehicle_type,
            plate_number=update.plate_number,
            last_updated_at=now,
        )

        await self.repository.save(record)

        await log_info(
            f"Водитель {driver_id} опубликовал статус {record.status}",
            type_msg=TypeMsg.DEBUG,
            extra={"driver_id": driver_id, "vehicle_type": record.vehicle_type.value},
        )
        return record

    async def snapshot(self, vehicle_filter: VehicleFilter | str | None = VehicleFilter.ALL) -> list[DriverRecord]:
        """
        Снимок видимых водителей.

        Порядок: порядок сканирования хранилища, вызывающий не должен на него полагаться.

        Raises:
            ValidationError: неизвестный фильтр
            StoreUnavailable: сбой хранилища
        """
        selected = parse_vehicle_filter(vehicle_filter)
        entries = await self.repository.scan()

        records: list[DriverRecord] = []
        for key, data in entries:
            if not is_active_status(data.get("status")):
                continue
            try:
                records.append(DriverRecord.model_validate(data))
            except PydanticValidationError as e:
                await log_warning(
                    f"Запись {key} не прошла валидацию и пропущена: {e.error_count()} ошибок",
                    extra={"key": key},
                )

        visible = filter_visible(records, selected)

        if len(visible) > self.snapshot_limit:
            await log_warning(
                f"Снимок обрезан: {len(visible)} водителей, лимит {self.snapshot_limit}",
                extra={"vehicle_filter": selected.value},
            )
            visible = visible[: self.snapshot_limit]

        return visible
