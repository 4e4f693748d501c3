# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-maasin-go-32-characters")
os.environ.setdefault("REDIS_PASSWORD", "")

from maasin_go.common.constants import UserRole  # noqa: E402
from maasin_go.common.errors import StoreUnavailable  # noqa: E402
from maasin_go.config.loader import Settings  # noqa: E402
from maasin_go.shared.models.user_dto import Identity  # noqa: E402


# =============================================================================
# ХРАНИЛИЩЕ В ПАМЯТИ
# =============================================================================

class InMemoryStore:
    """
    Хранилище ключ-значение в памяти с тем же контрактом, что RedisClient.
    fail=True имитирует недоступное хранилище.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreUnavailable("Хранилище недоступно (test)")

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._check()
        self.data[key] = value

    async def add(self, key: str, value: str) -> bool:
        self._check()
        if key in self.data:
            return False
        self.data[key] = value
        return True

    async def scan_prefix(self, prefix: str, limit: int | None = None) -> list[tuple[str, str]]:
        self._check()
        items = [(k, v) for k, v in self.data.items() if k.startswith(prefix)]
        return items if limit is None else items[:limit]

    async def ping(self) -> bool:
        return not self.fail


class FakeClock:
    """Управляемые часы для проверки lastUpdatedAt и createdAt."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "test",
        "PROJECT_NAME": "maasin_go_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "LOG_TO_FILE": False,
        "LOG_FORMAT": "colored",
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_NAMESPACE": "maasin_test",
        "REDIS_MAX_CONNECTIONS": 10,
        "JWT_SECRET_KEY": "test-secret-key-for-maasin-go-32-characters",
        "BCRYPT_ROUNDS": 4,
        "CITY_KEY": "maasin",
        "PRESENCE_SNAPSHOT_LIMIT": 500,
        "POLL_INTERVAL_SECONDS": 5.0,
        "API_BASE_URL": "http://testserver",
    }


@pytest.fixture
def test_settings(mock_config: dict[str, Any]) -> Settings:
    return Settings.from_dict(mock_config)


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ
# =============================================================================

@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента redis.asyncio."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.mget = AsyncMock(return_value=[])
    redis.ping = AsyncMock(return_value=True)
    return redis


# =============================================================================
# ФИКСТУРЫ ПОЛЬЗОВАТЕЛЕЙ
# =============================================================================

@pytest.fixture
def make_identity() -> Callable[..., Identity]:
    def _make(user_id: str = "driver-1", role: UserRole = UserRole.DRIVER, name: str | None = "Juan") -> Identity:
        return Identity(user_id=user_id, role=role, name=name, email=f"{user_id}@example.com")
    return _make


@pytest.fixture
def driver_identity(make_identity: Callable[..., Identity]) -> Identity:
    return make_identity("driver-1", UserRole.DRIVER, "Juan Dela Cruz")


@pytest.fixture
def passenger_identity(make_identity: Callable[..., Identity]) -> Identity:
    return make_identity("passenger-1", UserRole.PASSENGER, "Maria Santos")


# =============================================================================
# HTTP API
# =============================================================================

@pytest.fixture
def api_client(memory_store: InMemoryStore, test_settings: Settings) -> Generator[Any, None, None]:
    """TestClient приложения поверх хранилища в памяти."""
    from fastapi.testclient import TestClient

    from maasin_go.services.app import create_app

    app = create_app(store=memory_store, config=test_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def issue_token(test_settings: Settings, memory_store: InMemoryStore) -> Callable[..., str]:
    """Выпускает bearer-токен без регистрации."""
    from maasin_go.services.identity.provider import JwtIdentityProvider
    from maasin_go.shared.models.user_dto import UserDTO

    provider = JwtIdentityProvider(memory_store, test_settings.auth.JWT_SECRET_KEY)

    def _issue(user_id: str = "driver-1", role: UserRole = UserRole.DRIVER, name: str = "Juan") -> str:
        user = UserDTO(id=user_id, email=f"{user_id}@example.com", name=name, role=role)
        return provider.issue_token(user)

    return _issue


@pytest.fixture
def auth_headers(issue_token: Callable[..., str]) -> Callable[..., dict[str, str]]:
    """Заголовок Authorization для пользователя с заданной ролью."""
    def _headers(user_id: str = "driver-1", role: UserRole = UserRole.DRIVER, name: str = "Juan") -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user_id, role, name)}"}
    return _headers
