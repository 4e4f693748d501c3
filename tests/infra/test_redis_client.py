# tests/infra/test_redis_client.py
"""
Тесты для клиента Redis.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from maasin_go.common.errors import StoreUnavailable
from maasin_go.config.loader import Settings
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.infra.redis_client import RedisClient, init_redis


def scan_results(*keys: str) -> MagicMock:
    """Мок scan_iter: асинхронный генератор ключей."""
    async def _iter(*args, **kwargs):
        for key in keys:
            yield key
    return MagicMock(side_effect=_iter)


class TestRedisClient:
    """Тесты для RedisClient."""

    @pytest.fixture
    def redis_client(self) -> RedisClient:
        """Создаёт экземпляр RedisClient для тестов."""
        # Сбрасываем синглтон для каждого теста
        RedisClient._instance = None
        RedisClient._client = None
        return RedisClient()

    def test_singleton(self) -> None:
        RedisClient._instance = None

        assert RedisClient() is RedisClient()

    def test_satisfies_store_protocol(self, redis_client: RedisClient) -> None:
        assert isinstance(redis_client, KeyValueStore)

    def test_client_not_initialized(self, redis_client: RedisClient) -> None:
        with pytest.raises(RuntimeError, match="Redis клиент не инициализирован"):
            _ = redis_client.client

    def test_make_key(self, redis_client: RedisClient) -> None:
        assert redis_client._make_key("driver:abc") == "maasin:driver:abc"

    def test_strip_key(self, redis_client: RedisClient) -> None:
        assert redis_client._strip_key("maasin:driver:abc") == "driver:abc"

    @pytest.mark.asyncio
    async def test_connect(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        with patch("redis.asyncio.from_url", return_value=mock_redis):
            await redis_client.connect(url="redis://localhost:6379/0", max_connections=10, namespace="maasin_test")

        assert redis_client._client is mock_redis
        assert redis_client._namespace == "maasin_test"
        mock_redis.ping.assert_called_once()

    @pytest.mark.asyncio
    async def test_connect_scan_count(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.scan_iter = scan_results()

        with patch("redis.asyncio.from_url", return_value=mock_redis):
            await redis_client.connect(url="redis://localhost:6379/0", scan_count=50)
        await redis_client.scan_prefix("driver:")

        mock_redis.scan_iter.assert_called_once_with(match="maasin:driver:*", count=50)

    @pytest.mark.asyncio
    async def test_init_redis_uses_config(
        self, redis_client: RedisClient, mock_redis: AsyncMock, mock_config: dict
    ) -> None:
        config = Settings.from_dict({**mock_config, "REDIS_SCAN_COUNT": 37})
        mock_redis.scan_iter = scan_results()

        with patch("maasin_go.config.settings", config), patch("redis.asyncio.from_url", return_value=mock_redis):
            client = await init_redis()
        await client.scan_prefix("driver:")

        assert client is redis_client
        assert client._namespace == "maasin_test"
        mock_redis.scan_iter.assert_called_once_with(match="maasin_test:driver:*", count=37)

    @pytest.mark.asyncio
    async def test_connect_already_connected(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        redis_client._client = mock_redis

        with patch("redis.asyncio.from_url") as mock_from_url:
            await redis_client.connect(url="redis://localhost:6379/0")

        mock_from_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_disconnect(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        redis_client._client = mock_redis

        await redis_client.disconnect()

        mock_redis.aclose.assert_called_once()
        assert redis_client._client is None

    @pytest.mark.asyncio
    async def test_get(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.get.return_value = "value"
        redis_client._client = mock_redis

        assert await redis_client.get("driver:1") == "value"
        mock_redis.get.assert_called_once_with("maasin:driver:1")

    @pytest.mark.asyncio
    async def test_set_has_no_ttl(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        redis_client._client = mock_redis

        await redis_client.set("driver:1", "{}")

        mock_redis.set.assert_called_once_with("maasin:driver:1", "{}")

    @pytest.mark.asyncio
    async def test_add_uses_nx(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        redis_client._client = mock_redis

        assert await redis_client.add("fares:maasin", "{}") is True
        mock_redis.set.assert_called_once_with("maasin:fares:maasin", "{}", nx=True)

    @pytest.mark.asyncio
    async def test_add_existing_key(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.set.return_value = None
        redis_client._client = mock_redis

        assert await redis_client.add("fares:maasin", "{}") is False

    @pytest.mark.asyncio
    async def test_redis_error_becomes_store_unavailable(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.get.side_effect = RedisConnectionError("connection refused")
        redis_client._client = mock_redis

        with pytest.raises(StoreUnavailable):
            await redis_client.get("driver:1")

    @pytest.mark.asyncio
    async def test_scan_prefix(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.scan_iter = scan_results("maasin:driver:a", "maasin:driver:b")
        mock_redis.mget.return_value = ['{"a": 1}', '{"b": 2}']
        redis_client._client = mock_redis

        result = await redis_client.scan_prefix("driver:")

        assert result == [("driver:a", '{"a": 1}'), ("driver:b", '{"b": 2}')]
        mock_redis.scan_iter.assert_called_once_with(match="maasin:driver:*", count=200)
        mock_redis.mget.assert_called_once_with(["maasin:driver:a", "maasin:driver:b"])

    @pytest.mark.asyncio
    async def test_scan_prefix_deduplicates_and_skips_deleted(
        self, redis_client: RedisClient, mock_redis: AsyncMock
    ) -> None:
        mock_redis.scan_iter = scan_results("maasin:driver:a", "maasin:driver:b", "maasin:driver:a")
        mock_redis.mget.return_value = ['{"a": 1}', None]
        redis_client._client = mock_redis

        result = await redis_client.scan_prefix("driver:")

        assert result == [("driver:a", '{"a": 1}')]
        mock_redis.mget.assert_called_once_with(["maasin:driver:a", "maasin:driver:b"])

    @pytest.mark.asyncio
    async def test_scan_prefix_limit(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.scan_iter = scan_results("maasin:driver:a", "maasin:driver:b", "maasin:driver:c")
        mock_redis.mget.return_value = ["1", "2"]
        redis_client._client = mock_redis

        result = await redis_client.scan_prefix("driver:", limit=2)

        assert [key for key, _ in result] == ["driver:a", "driver:b"]

    @pytest.mark.asyncio
    async def test_scan_prefix_empty(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.scan_iter = scan_results()
        redis_client._client = mock_redis

        assert await redis_client.scan_prefix("driver:") == []
        mock_redis.mget.assert_not_called()

    @pytest.mark.asyncio
    async def test_scan_prefix_escapes_glob(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        mock_redis.scan_iter = scan_results()
        redis_client._client = mock_redis

        await redis_client.scan_prefix("driver:[x]*")

        mock_redis.scan_iter.assert_called_once_with(match=r"maasin:driver:\[x\]\**", count=200)

    @pytest.mark.asyncio
    async def test_ping(self, redis_client: RedisClient, mock_redis: AsyncMock) -> None:
        redis_client._client = mock_redis
        assert await redis_client.ping() is True

    @pytest.mark.asyncio
    async def test_ping_when_not_connected(self, redis_client: RedisClient) -> None:
        assert await redis_client.ping() is False
