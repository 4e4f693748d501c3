"""
Иерархия ошибок приложения.

Каждая ошибка несёт машинный код и HTTP-статус; FastAPI-приложение
превращает их в ответ `{"error": ..., "errorCode": ...}` в одном обработчике.
"""

from __future__ import annotations

from typing import Any


class CommuteError(Exception):
    """Базовая ошибка приложения."""

    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthenticated(CommuteError):
    """Отсутствует или невалиден bearer-токен."""

    error_code = "unauthenticated"
    status_code = 401


class PermissionDenied(CommuteError):
    """Пользователь аутентифицирован, но его роль не допускает операцию."""

    error_code = "permission_denied"
    status_code = 403


class ValidationError(CommuteError):
    """Некорректные входные данные."""

    error_code = "validation_error"
    status_code = 400


class NotFoundError(CommuteError):
    """Запрошенная сущность не существует."""

    error_code = "not_found"
    status_code = 404


class StoreUnavailable(CommuteError):
    """Ошибка ввода-вывода хранилища ключ-значение."""

    error_code = "store_unavailable"
    status_code = 500


class ServiceUnavailable(CommuteError):
    """API недоступно (сетевая ошибка или неожиданный ответ). Поднимается только клиентом."""

    error_code = "service_unavailable"
    status_code = 503


ERRORS_BY_CODE: dict[str, type[CommuteError]] = {
    cls.error_code: cls
    for cls in (
        Unauthenticated,
        PermissionDenied,
        ValidationError,
        NotFoundError,
        StoreUnavailable,
        ServiceUnavailable,
    )
}
