#!/usr/bin/env python3
# main.py
"""
Главная точка входа Maasin Go.
Запускает HTTP API или опросчик водителей в терминале в зависимости от аргументов.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from maasin_go.config import settings
from maasin_go.common.logger import setup_logging, log_info, log_error
from maasin_go.common.constants import TypeMsg

VALID_MODES = ("api", "watch")

# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_api() -> None:
    """Запускает HTTP API (uvicorn). Подключение к Redis выполняется в lifespan приложения."""
    import uvicorn

    await log_info(
        f"Запуск Maasin Go API на {settings.api.API_HOST}:{settings.api.API_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "maasin_go.services.app:app",
        host=settings.api.API_HOST,
        port=settings.api.API_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("API: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


def print_drivers(drivers: list) -> None:
    """Печатает видимых водителей одной таблицей."""
    print(f"\n{len(drivers)} водителей на линии")
    for driver in drivers:
        print(
            f"  {driver.vehicle_type.value:<9} {driver.status.value:<9} "
            f"{driver.display_name:<20} {driver.plate_number:<10} {driver.route}"
        )


async def run_watch(vehicle_filter: str = "all") -> None:
    """Опрашивает GET /drivers и печатает снимок, пока не придёт сигнал."""
    from maasin_go.client import CommuteApiClient, DriverPoller

    client = CommuteApiClient()
    poller = DriverPoller(
        client.get_drivers,
        interval=settings.presence.POLL_INTERVAL_SECONDS,
        vehicle_filter=vehicle_filter,
        on_update=print_drivers,
        on_error=lambda e: print(f"Не удалось обновить список: {e}. Повтор через {poller.interval}с"),
    )

    await log_info(f"Опрос {settings.client.API_BASE_URL} (фильтр: {vehicle_filter})", type_msg=TypeMsg.INFO)
    try:
        await poller.start()
        if _shutdown_event is not None:
            await _shutdown_event.wait()
    finally:
        await poller.stop()
        await poller.join()
        await client.close()


async def main(mode: str | None = None, vehicle_filter: str = "all") -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (api, watch). Если None, берётся из COMPONENT_MODE.
        vehicle_filter: Фильтр для режима watch
    """
    setup_logging()
    setup_signal_handlers()

    if mode is None:
        mode = settings.system.COMPONENT_MODE if settings.system.COMPONENT_MODE in VALID_MODES else "api"

    await log_info(
        f"{settings.system.PROJECT_NAME} v{settings.system.VERSION}: запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
        extra={"environment": settings.system.ENVIRONMENT},
    )

    try:
        if mode == "api":
            _running_tasks.append(asyncio.create_task(run_api()))
        elif mode == "watch":
            _running_tasks.append(asyncio.create_task(run_watch(vehicle_filter)))
        else:
            await log_error(f"Неизвестный режим: {mode}")
            return

        await asyncio.gather(*_running_tasks, return_exceptions=True)
    except asyncio.CancelledError:
        await log_info("Задача отменена, выполняется graceful shutdown", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise
    finally:
        for task in _running_tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*_running_tasks, return_exceptions=True)
        _running_tasks.clear()
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
Maasin Go — живая доступность трициклов и мультикабов Maasin City

Использование:
    python main.py [mode] [vehicleType]

Режимы:
    api                    — HTTP API (FastAPI + uvicorn)
    watch [vehicleType]    — опрос GET /drivers в терминале (all, tricycle, multicab)

Примеры:
    python main.py                       # режим из COMPONENT_MODE (по умолчанию api)
    python main.py api
    python main.py watch multicab
    """)


if __name__ == "__main__":
    mode = None
    vehicle_filter = "all"

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        elif arg in VALID_MODES:
            mode = arg
        else:
            print(f"Ошибка: неизвестный режим '{arg}'")
            print_usage()
            sys.exit(1)

    if len(sys.argv) > 2:
        vehicle_filter = sys.argv[2].lower()

    try:
        asyncio.run(main(mode, vehicle_filter))
    except KeyboardInterrupt:
        pass
