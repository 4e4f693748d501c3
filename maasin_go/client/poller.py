# maasin_go/client/poller.py
"""
Опросчик снимка водителей на стороне пассажира.

Состояния: IDLE и POLLING. После start() сразу выполняется один запрос,
затем по одному каждые interval секунд до stop(). Каждый тик независим:
ошибка запроса сохраняется в last_error и передаётся в on_error,
следующий тик всё равно выполняется. Запросы могут перекрываться;
каждый получает номер, и ответ старее уже применённого отбрасывается.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional, Set

from maasin_go.common.constants import TypeMsg, VehicleFilter
from maasin_go.common.logger import log_debug, log_info, log_warning
from maasin_go.services.presence.policy import filter_visible, parse_vehicle_filter
from maasin_go.shared.models.driver_dto import DriverRecord

FetchSnapshot = Callable[[], Awaitable[list[DriverRecord]]]
UpdateCallback = Callable[[list[DriverRecord]], None]
ErrorCallback = Callable[[Exception], None]


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class DriverPoller:
    """
    Периодически запрашивает полный снимок и применяет фильтр локально,
    поэтому смена фильтра не требует сетевого запроса.
    """

    def __init__(
        self,
        fetch: FetchSnapshot,
        *,
        interval: float = 5.0,
        vehicle_filter: VehicleFilter | str = VehicleFilter.ALL,
        on_update: Optional[UpdateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Args:
            fetch: Запрос нефильтрованного снимка (например CommuteApiClient.get_drivers)
            interval: Период опроса в секундах
            vehicle_filter: Начальный фильтр по типу транспорта
            on_update: Вызывается с видимыми водителями после каждого применения
            on_error: Вызывается с ошибкой неудачного запроса
        """
        self._fetch = fetch
        self.interval = interval
        self._filter = parse_vehicle_filter(vehicle_filter)
        self.on_update = on_update
        self.on_error = on_error

        self.state = PollerState.IDLE
        self.last_error: Optional[Exception] = None
        self._snapshot: list[DriverRecord] = []
        self._received = False

        self._next_seq = 0
        self._applied_seq = 0
        # Меняется при start/stop: ответы прошлого запуска отбрасываются
        self._generation = 0

        self._timer_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def vehicle_filter(self) -> VehicleFilter:
        return self._filter

    @property
    def snapshot(self) -> list[DriverRecord]:
        """Последний применённый снимок без фильтра."""
        return list(self._snapshot)

    @property
    def visible(self) -> list[DriverRecord]:
        """Водители, видимые при текущем фильтре."""
        return filter_visible(self._snapshot, self._filter)

    @property
    def has_data(self) -> bool:
        return self._received

    async def start(self) -> None:
        """Переходит в POLLING и сразу запрашивает снимок."""
        if self.state == PollerState.POLLING:
            return

        self.state = PollerState.POLLING
        self._generation += 1
        await log_info(f"Опрос водителей запущен, интервал {self.interval}с", type_msg=TypeMsg.DEBUG)

        self._spawn_fetch()
        self._timer_task = asyncio.create_task(self._run_timer(self._generation))

    async def stop(self) -> None:
        """
        Останавливает таймер. Запросы в полёте не прерываются,
        но их результаты будут отброшены.
        """
        if self.state == PollerState.IDLE:
            return

        self.state = PollerState.IDLE
        self._generation += 1

        if self._timer_task is not None:
            self._timer_task.cancel()
            await asyncio.gather(self._timer_task, return_exceptions=True)
            self._timer_task = None

        await log_info("Опрос водителей остановлен", type_msg=TypeMsg.DEBUG)

    def refresh(self) -> Optional[asyncio.Task]:
        """Внеочередной запрос (кнопка "повторить"). Вне POLLING ничего не делает."""
        if self.state != PollerState.POLLING:
            return None
        return self._spawn_fetch()

    async def join(self) -> None:
        """Дожидается завершения всех запросов в полёте."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def set_filter(self, vehicle_filter: VehicleFilter | str) -> list[DriverRecord]:
        """
        Меняет фильтр и применяет его к последнему снимку без запроса.

        Raises:
            ValidationError: неизвестный фильтр
        """
        self._filter = parse_vehicle_filter(vehicle_filter)
        visible = self.visible
        if self._received and self.on_update is not None:
            self.on_update(visible)
        return visible

    async def _run_timer(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if generation != self._generation:
                return
            self._spawn_fetch()

    def _spawn_fetch(self) -> asyncio.Task:
        self._next_seq += 1
        task = asyncio.create_task(self._fetch_once(self._next_seq, self._generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _fetch_once(self, seq: int, generation: int) -> None:
        try:
            drivers = await self._fetch()
        except Exception as e:
            # Ошибка старого запроса не затирает более свежий снимок
            if generation != self._generation or seq <= self._applied_seq:
                return
            self.last_error = e
            await log_warning(f"Запрос снимка #{seq} не выполнен: {e}", extra={"seq": seq})
            if self.on_error is not None:
                self.on_error(e)
            return

        if generation != self._generation:
            await log_debug(f"Снимок #{seq} отброшен: опрос остановлен или перезапущен")
            return
        if seq <= self._applied_seq:
            await log_debug(f"Снимок #{seq} отброшен: уже применён #{self._applied_seq}")
            return

        self._applied_seq = seq
        self._snapshot = list(drivers)
        self._received = True
        self.last_error = None

        if self.on_update is not None:
            self.on_update(self.visible)
