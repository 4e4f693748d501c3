# maasin_go/infra/kv_store.py
"""
Контракт хранилища ключ-значение.

Хранилище оперирует непрозрачными строковыми ключами и значениями:
get / set / add (запись только при отсутствии ключа) / сканирование по префиксу.
Транзакций и TTL нет. Замена значения одного ключа атомарна: читатель
никогда не видит частично записанное значение.

Все операции при сбое ввода-вывода поднимают StoreUnavailable.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Минимальный интерфейс хранилища, которым пользуются сервисы."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def add(self, key: str, value: str) -> bool:
        """Записывает значение, только если ключа ещё нет. True, если запись произошла."""
        ...

    async def scan_prefix(self, prefix: str, limit: int | None = None) -> list[tuple[str, str]]:
        """Возвращает пары (ключ, значение) для всех ключей с префиксом, в порядке сканирования."""
        ...

    async def ping(self) -> bool:
        ...


def dumps(data: Any) -> str:
    """Сериализует данные для хранилища."""
    return json.dumps(data, ensure_ascii=False, default=str)
