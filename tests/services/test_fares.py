# tests/services/test_fares.py
"""
Тесты справочника тарифов.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from maasin_go.common.errors import StoreUnavailable
from maasin_go.services.fares.service import DEFAULT_FARES, FareService
from maasin_go.shared.models.fare_dto import FareCatalog, FareEntry


class TestFareService:
    """GetFares."""

    @pytest.mark.asyncio
    async def test_first_call_seeds_defaults(self, memory_store) -> None:
        service = FareService(memory_store)

        fares = await service.get_fares()

        assert fares == DEFAULT_FARES
        assert fares.tricycle and fares.multicab
        stored = json.loads(memory_store.data["fares:maasin"])
        assert stored["tricycle"][0] == {"route": "Poblacion to Combado", "fare": "15-20", "distance": "3km"}

    @pytest.mark.asyncio
    async def test_second_call_returns_identical_catalog(self, memory_store) -> None:
        service = FareService(memory_store)

        first = await service.get_fares()
        second = await service.get_fares()

        assert first == second

    @pytest.mark.asyncio
    async def test_existing_catalog_not_overwritten(self, memory_store) -> None:
        custom = FareCatalog(tricycle=[FareEntry(route="Mambajao to Tunga-tunga", fare="12", distance="2km")])
        memory_store.data["fares:maasin"] = custom.model_dump_json()

        fares = await FareService(memory_store).get_fares()

        assert fares == custom

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_converge(self, memory_store) -> None:
        service = FareService(memory_store)

        results = await asyncio.gather(*(service.get_fares() for _ in range(5)))

        assert all(result == results[0] for result in results)

    @pytest.mark.asyncio
    async def test_lost_seed_race_reads_winner(self) -> None:
        winner = FareCatalog(multicab=[FareEntry(route="Bato to Poblacion", fare="30", distance="6km")])
        store = AsyncMock()
        store.get = AsyncMock(side_effect=[None, winner.model_dump_json()])
        store.add = AsyncMock(return_value=False)

        fares = await FareService(store).get_fares()

        assert fares == winner

    @pytest.mark.asyncio
    async def test_city_key(self, memory_store) -> None:
        await FareService(memory_store, city_key="tacloban").get_fares()

        assert "fares:tacloban" in memory_store.data

    @pytest.mark.asyncio
    async def test_store_failure(self, memory_store) -> None:
        memory_store.fail = True

        with pytest.raises(StoreUnavailable):
            await FareService(memory_store).get_fares()


class TestFaresRoute:
    """GET /fares."""

    def test_get_fares(self, api_client) -> None:
        response = api_client.get("/fares")

        assert response.status_code == 200
        fares = response.json()["fares"]
        assert len(fares["tricycle"]) == 5
        assert len(fares["multicab"]) == 3
        assert api_client.get("/fares").json()["fares"] == fares

    def test_store_unavailable(self, api_client, memory_store) -> None:
        memory_store.fail = True

        response = api_client.get("/fares")

        assert response.status_code == 500
        assert response.json()["errorCode"] == "store_unavailable"
