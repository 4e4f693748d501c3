"""
Хранение записей водителей в хранилище ключ-значение.
Ключ записи: driver:{driver_id}.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from maasin_go.common.constants import DRIVER_KEY_PREFIX
from maasin_go.common.logger import log_warning
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.shared.models.driver_dto import DriverRecord


class DriverRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key(driver_id: str) -> str:
        return f"{DRIVER_KEY_PREFIX}{driver_id}"

    async def get(self, driver_id: str) -> DriverRecord | None:
        """Последняя запись водителя или None (нет записи или она повреждена)."""
        raw = await self.store.get(self.key(driver_id))
        if raw is None:
            return None
        try:
            return DriverRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            await log_warning(
                f"Повреждённая запись водителя {driver_id}: {e.error_count()} ошибок",
                extra={"driver_id": driver_id},
            )
            return None

    async def save(self, record: DriverRecord) -> None:
        """Полностью заменяет запись водителя (last-write-wins)."""
        await self.store.set(self.key(record.driver_id), record.model_dump_json(by_alias=True))

    async def scan(self) -> list[tuple[str, dict[str, Any]]]:
        """
        Все записи в пространстве driver: как сырые словари.
        Значения, которые не являются JSON-объектом, пропускаются.
        """
        entries = await self.store.scan_prefix(DRIVER_KEY_PREFIX)
        result: list[tuple[str, dict[str, Any]]] = []
        for key, raw in entries:
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await log_warning(f"Запись {key} не является JSON, пропущена")
                continue
            if not isinstance(data, dict):
                await log_warning(f"Запись {key} не является объектом, пропущена")
                continue
            result.append((key, data))
        return result
