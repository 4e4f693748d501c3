"""
Модели справочника тарифов.
"""

from __future__ import annotations

from pydantic import Field

from maasin_go.shared.models.common import CamelModel


class FareEntry(CamelModel):
    """Тариф на маршруте."""

    route: str
    fare: str
    distance: str


class FareCatalog(CamelModel):
    """Тарифы по типам транспорта."""

    tricycle: list[FareEntry] = Field(default_factory=list)
    multicab: list[FareEntry] = Field(default_factory=list)


class FaresResponse(CamelModel):
    """Ответ GET /fares."""

    fares: FareCatalog
