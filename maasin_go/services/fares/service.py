"""
Справочник тарифов.

Справочные данные, засеваемые при первом чтении. Засев идёт записью
"только если ключа нет", поэтому конкурентные первые вызовы сходятся
на первом сохранённом значении.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from maasin_go.common.constants import FARES_KEY_PREFIX, TypeMsg
from maasin_go.common.logger import log_info, log_warning
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.shared.models.fare_dto import FareCatalog, FareEntry

DEFAULT_FARES = FareCatalog(
    tricycle=[
        FareEntry(route="Poblacion to Combado", fare="15-20", distance="3km"),
        FareEntry(route="Terminal to Maasin City College", fare="10-15", distance="2km"),
        FareEntry(route="Public Market to City Hall", fare="10-12", distance="1.5km"),
        FareEntry(route="Ibarra to Poblacion", fare="20-25", distance="4km"),
        FareEntry(route="Guadalupe to Terminal", fare="15-18", distance="2.5km"),
    ],
    multicab=[
        FareEntry(route="Poblacion to Combado", fare="15", distance="3km"),
        FareEntry(route="Terminal to Maasin City College", fare="12", distance="2km"),
        FareEntry(route="Bato to Poblacion", fare="25", distance="6km"),
    ],
)


class FareService:
    def __init__(self, store: KeyValueStore, city_key: str = "maasin", defaults: FareCatalog = DEFAULT_FARES):
        self.store = store
        self.city_key = city_key
        self.defaults = defaults

    @property
    def key(self) -> str:
        return f"{FARES_KEY_PREFIX}{self.city_key}"

    async def _read(self) -> FareCatalog | None:
        raw = await self.store.get(self.key)
        if raw is None:
            return None
        try:
            return FareCatalog.model_validate_json(raw)
        except PydanticValidationError as e:
            await log_warning(f"Повреждённый справочник тарифов {self.key}: {e.error_count()} ошибок")
            return None

    async def get_fares(self) -> FareCatalog:
        """
        Тарифы города. При пустом справочнике засевает значения по умолчанию.

        Raises:
            StoreUnavailable: сбой хранилища
        """
        catalog = await self._read()
        if catalog is not None:
            return catalog

        created = await self.store.add(self.key, self.defaults.model_dump_json(by_alias=True))
        if created:
            await log_info(f"Справочник тарифов {self.key} засеян значениями по умолчанию", type_msg=TypeMsg.INFO)
            return self.defaults

        # Другой запрос засеял справочник раньше нас
        catalog = await self._read()
        return catalog if catalog is not None else self.defaults
