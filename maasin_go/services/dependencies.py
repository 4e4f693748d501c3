# maasin_go/services/dependencies.py
"""
Dependency Injection для HTTP API.

Синглтоны создаются в init_dependencies() при старте приложения,
в тестах их подменяют через app.dependency_overrides или передают своё хранилище.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from maasin_go.config.loader import Settings
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.services.fares.service import FareService
from maasin_go.services.feedback.service import FeedbackService
from maasin_go.services.identity.provider import IdentityProvider, JwtIdentityProvider
from maasin_go.services.identity.service import AccountService
from maasin_go.services.presence.repository import DriverRepository
from maasin_go.services.presence.service import PresenceRegistry
from maasin_go.services.profiles.repository import ProfileRepository
from maasin_go.services.profiles.service import ProfileService
from maasin_go.shared.models.user_dto import Identity


# Синглтоны
_store: KeyValueStore | None = None
_identity_provider: IdentityProvider | None = None
_presence_registry: PresenceRegistry | None = None
_profile_service: ProfileService | None = None
_account_service: AccountService | None = None
_fare_service: FareService | None = None
_feedback_service: FeedbackService | None = None

bearer_scheme = HTTPBearer(auto_error=False)


def init_dependencies(store: KeyValueStore, settings: Settings) -> None:
    """Инициализировать зависимости при старте приложения."""
    global _store, _identity_provider, _presence_registry, _profile_service
    global _account_service, _fare_service, _feedback_service

    _store = store
    _identity_provider = JwtIdentityProvider(
        store,
        settings.auth.JWT_SECRET_KEY,
        algorithm=settings.auth.JWT_ALGORITHM,
        token_ttl_minutes=settings.auth.ACCESS_TOKEN_TTL_MINUTES,
        bcrypt_rounds=settings.auth.BCRYPT_ROUNDS,
    )
    _presence_registry = PresenceRegistry(
        DriverRepository(store),
        default_location=(settings.domain.DEFAULT_LATITUDE, settings.domain.DEFAULT_LONGITUDE),
        snapshot_limit=settings.presence.PRESENCE_SNAPSHOT_LIMIT,
    )
    _profile_service = ProfileService(ProfileRepository(store))
    _account_service = AccountService(
        _identity_provider,
        _profile_service,
        min_password_length=settings.auth.MIN_PASSWORD_LENGTH,
    )
    _fare_service = FareService(store, city_key=settings.domain.CITY_KEY)
    _feedback_service = FeedbackService(store)


def cleanup_dependencies() -> None:
    """Сбросить синглтоны при остановке приложения."""
    global _store, _identity_provider, _presence_registry, _profile_service
    global _account_service, _fare_service, _feedback_service
    _store = None
    _identity_provider = None
    _presence_registry = None
    _profile_service = None
    _account_service = None
    _fare_service = None
    _feedback_service = None


def get_store() -> KeyValueStore:
    """Получить хранилище ключ-значение."""
    if _store is None:
        raise RuntimeError("Хранилище не инициализировано. Вызовите init_dependencies()")
    return _store


def get_identity_provider() -> IdentityProvider:
    """Получить провайдер идентификации."""
    if _identity_provider is None:
        raise RuntimeError("IdentityProvider не инициализирован. Вызовите init_dependencies()")
    return _identity_provider


def get_presence_registry() -> PresenceRegistry:
    """Получить реестр присутствия."""
    if _presence_registry is None:
        raise RuntimeError("PresenceRegistry не инициализирован. Вызовите init_dependencies()")
    return _presence_registry


def get_profile_service() -> ProfileService:
    if _profile_service is None:
        raise RuntimeError("ProfileService не инициализирован. Вызовите init_dependencies()")
    return _profile_service


def get_account_service() -> AccountService:
    if _account_service is None:
        raise RuntimeError("AccountService не инициализирован. Вызовите init_dependencies()")
    return _account_service


def get_fare_service() -> FareService:
    if _fare_service is None:
        raise RuntimeError("FareService не инициализирован. Вызовите init_dependencies()")
    return _fare_service


def get_feedback_service() -> FeedbackService:
    if _feedback_service is None:
        raise RuntimeError("FeedbackService не инициализирован. Вызовите init_dependencies()")
    return _feedback_service


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Identity | None:
    """
    Личность вызывающего из заголовка Authorization: Bearer.

    Без заголовка возвращает None (операция сама решает, нужна ли личность),
    невалидный токен поднимает Unauthenticated.
    """
    if credentials is None:
        return None
    return provider.verify_token(credentials.credentials)
