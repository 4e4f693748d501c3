# maasin_go/infra/redis_client.py
"""
Клиент Redis: реализация хранилища ключ-значение.
Поддерживает запись только при отсутствии ключа и сканирование по префиксу.
"""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.exceptions import RedisError

from maasin_go.common.constants import TypeMsg
from maasin_go.common.errors import StoreUnavailable
from maasin_go.common.logger import log_error, log_info

# Спецсимволы glob-шаблона SCAN MATCH
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisClient:
    """
    Асинхронный клиент Redis.
    Поддерживает:
    - get / set / add (SET NX)
    - сканирование ключей по префиксу (SCAN MATCH + MGET)

    Ошибки Redis превращаются в StoreUnavailable.
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Инициализация (вызывается только один раз благодаря Singleton)."""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "maasin"
        self._scan_count = 200

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    def _make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        return f"{self._namespace}:{key}"

    def _strip_key(self, key: str) -> str:
        """Убирает namespace из ключа."""
        return key[len(self._namespace) + 1:]

    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
        namespace: str | None = None,
        scan_count: int | None = None,
    ) -> None:
        """
        Подключается к Redis.

        Args:
            url: URL Redis (если None, берётся из конфига)
            max_connections: Максимальное количество соединений
            namespace: Префикс всех ключей приложения
            scan_count: Подсказка COUNT для SCAN
        """
        if self._client is not None:
            return

        if url is None:
            from maasin_go.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            namespace = namespace or settings.redis.REDIS_NAMESPACE
            scan_count = scan_count or settings.redis.REDIS_SCAN_COUNT

        if namespace:
            self._namespace = namespace
        if scan_count:
            self._scan_count = scan_count

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        self._client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )

        await self._client.ping()

        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    @asynccontextmanager
    async def _store_errors(self, operation: str, key: str) -> AsyncIterator[None]:
        """Превращает ошибки Redis в StoreUnavailable."""
        try:
            yield
        except RedisError as e:
            await log_error(
                f"Redis {operation} не выполнен: {e}",
                extra={"key": key},
            )
            raise StoreUnavailable(f"Хранилище недоступно ({operation})") from e

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def get(self, key: str) -> str | None:
        """Получает значение по ключу."""
        async with self._store_errors("get", key):
            return await self.client.get(self._make_key(key))

    async def set(self, key: str, value: str) -> None:
        """Атомарно заменяет значение ключа."""
        async with self._store_errors("set", key):
            await self.client.set(self._make_key(key), value)

    async def add(self, key: str, value: str) -> bool:
        """Записывает значение, только если ключа нет (SET NX)."""
        async with self._store_errors("add", key):
            return bool(await self.client.set(self._make_key(key), value, nx=True))

    async def scan_prefix(self, prefix: str, limit: int | None = None) -> list[tuple[str, str]]:
        """
        Возвращает все пары (ключ, значение) с заданным префиксом.

        Args:
            prefix: Префикс ключа без namespace
            limit: Максимальное количество пар (None: без ограничения)

        Returns:
            Список (ключ без namespace, значение) в порядке SCAN
        """
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._make_key(prefix)) + "*"
        keys: list[str] = []
        seen: set[str] = set()

        async with self._store_errors("scan", prefix):
            async for key in self.client.scan_iter(match=pattern, count=self._scan_count):
                if key in seen:
                    # SCAN может вернуть ключ повторно
                    continue
                seen.add(key)
                keys.append(key)
                if limit is not None and len(keys) >= limit:
                    break

            if not keys:
                return []

            values = await self.client.mget(keys)

        # Ключ мог быть удалён между SCAN и MGET
        return [
            (self._strip_key(key), value)
            for key, value in zip(keys, values)
            if value is not None
        ]

    # =========================================================================
    # HEALTH CHECK
    # =========================================================================

    async def ping(self) -> bool:
        """
        Проверяет здоровье подключения к Redis.

        Returns:
            True если подключение работает
        """
        try:
            return bool(await self.client.ping())
        except (RedisError, RuntimeError) as e:
            await log_error(f"Health check Redis failed: {e}")
            return False


def get_redis() -> RedisClient:
    """Возвращает глобальный экземпляр RedisClient."""
    return RedisClient()


async def init_redis() -> RedisClient:
    """
    Инициализирует подключение к Redis.
    Использует настройки из конфигурации.
    """
    from maasin_go.config import settings

    redis_client = get_redis()
    await redis_client.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
        namespace=settings.redis.REDIS_NAMESPACE,
        scan_count=settings.redis.REDIS_SCAN_COUNT,
    )
    await log_info(
        f"Redis подключён: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )
    return redis_client


