# maasin_go/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины: config/config.json.
Секретные данные переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации (можно переопределить через MAASIN_GO_CONFIG)."""
    override = os.getenv("MAASIN_GO_CONFIG")
    if override:
        return Path(override)
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "maasin_go"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = "api"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760


class ApiSettings(BaseModel):
    """Настройки HTTP API."""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])


class RedisSettings(BaseModel):
    """Настройки Redis (хранилище ключ-значение)."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = Field(default="", validate_default=True)
    REDIS_NAMESPACE: str = "maasin"
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SCAN_COUNT: int = 200

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class AuthSettings(BaseModel):
    """Настройки провайдера идентификации (JWT + bcrypt)."""
    JWT_SECRET_KEY: str = Field(default="", validate_default=True)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12
    MIN_PASSWORD_LENGTH: int = 6

    @field_validator("JWT_SECRET_KEY", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает секрет из переменных окружения, если не задан."""
        if not v:
            return os.getenv("JWT_SECRET_KEY", "")
        return v


class DomainSettings(BaseModel):
    """Настройки города."""
    CITY_KEY: str = "maasin"
    DEFAULT_LATITUDE: float = 10.1328
    DEFAULT_LONGITUDE: float = 124.8422


class PresenceSettings(BaseModel):
    """Настройки реестра присутствия водителей."""
    PRESENCE_SNAPSHOT_LIMIT: int = 500
    POLL_INTERVAL_SECONDS: float = 5.0


class ClientSettings(BaseModel):
    """Настройки HTTP-клиента пассажира."""
    API_BASE_URL: str = "http://localhost:8000"
    REQUEST_TIMEOUT: float = 10.0


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    domain: DomainSettings = Field(default_factory=DomainSettings)
    presence: PresenceSettings = Field(default_factory=PresenceSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты переопределяются из переменных окружения.
        """
        config_data = load_config_json()
        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> "Settings":
        """Создаёт объект Settings из плоского словаря конфигурации."""
        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        filtered_data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        # Маппинг полей в секции
        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "maasin_go"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", True),
                ENVIRONMENT=os.getenv("ENVIRONMENT", filtered_data.get("ENVIRONMENT", "development")),
                COMPONENT_MODE=os.getenv("COMPONENT_MODE", filtered_data.get("COMPONENT_MODE", "api")),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", filtered_data.get("LOG_LEVEL", "DEBUG")),
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
            ),
            api=ApiSettings(
                API_HOST=os.getenv("API_HOST", filtered_data.get("API_HOST", "0.0.0.0")),
                API_PORT=int(os.getenv("API_PORT", filtered_data.get("API_PORT", 8000))),
                CORS_ORIGINS=filtered_data.get("CORS_ORIGINS", ["*"]),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", filtered_data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", filtered_data.get("REDIS_PORT", 6379))),
                REDIS_DB=filtered_data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", filtered_data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=filtered_data.get("REDIS_NAMESPACE", "maasin"),
                REDIS_MAX_CONNECTIONS=filtered_data.get("REDIS_MAX_CONNECTIONS", 50),
                REDIS_SCAN_COUNT=filtered_data.get("REDIS_SCAN_COUNT", 200),
            ),
            auth=AuthSettings(
                JWT_SECRET_KEY=os.getenv("JWT_SECRET_KEY", filtered_data.get("JWT_SECRET_KEY", "")),
                JWT_ALGORITHM=filtered_data.get("JWT_ALGORITHM", "HS256"),
                ACCESS_TOKEN_TTL_MINUTES=filtered_data.get("ACCESS_TOKEN_TTL_MINUTES", 60 * 24),
                BCRYPT_ROUNDS=filtered_data.get("BCRYPT_ROUNDS", 12),
                MIN_PASSWORD_LENGTH=filtered_data.get("MIN_PASSWORD_LENGTH", 6),
            ),
            domain=DomainSettings(
                CITY_KEY=filtered_data.get("CITY_KEY", "maasin"),
                DEFAULT_LATITUDE=filtered_data.get("DEFAULT_LATITUDE", 10.1328),
                DEFAULT_LONGITUDE=filtered_data.get("DEFAULT_LONGITUDE", 124.8422),
            ),
            presence=PresenceSettings(
                PRESENCE_SNAPSHOT_LIMIT=filtered_data.get("PRESENCE_SNAPSHOT_LIMIT", 500),
                POLL_INTERVAL_SECONDS=filtered_data.get("POLL_INTERVAL_SECONDS", 5.0),
            ),
            client=ClientSettings(
                API_BASE_URL=os.getenv("API_BASE_URL", filtered_data.get("API_BASE_URL", "http://localhost:8000")),
                REQUEST_TIMEOUT=filtered_data.get("REQUEST_TIMEOUT", 10.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
