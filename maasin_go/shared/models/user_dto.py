"""
Модели пользователей, профилей и идентичности.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from maasin_go.common.constants import UserRole, VehicleType
from maasin_go.shared.models.common import CamelModel


class Identity(BaseModel):
    """Проверенная личность вызывающего (из bearer-токена)."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    name: str | None = None
    email: str | None = None


class SignupRequest(CamelModel):
    """Тело регистрации. Обязательность полей проверяет сервис."""

    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str | None = None


class LoginRequest(CamelModel):
    """Тело входа."""

    email: str
    password: str


class UserDTO(CamelModel):
    """Публичные данные пользователя."""

    id: str
    email: str
    name: str
    role: UserRole


class SignupResponse(CamelModel):
    """Ответ на регистрацию."""

    success: bool = True
    user: UserDTO


class TokenResponse(CamelModel):
    """Ответ на вход."""

    access_token: str
    token_type: str = "bearer"
    user: UserDTO


class ProfileDTO(CamelModel):
    """Профиль пользователя."""

    id: str
    email: str | None = None
    name: str
    role: UserRole
    plate_number: str | None = None
    vehicle_type: VehicleType | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpdateProfileRequest(CamelModel):
    """Тело PUT /profile. Применяются только переданные поля."""

    name: str | None = None
    plate_number: str | None = None
    vehicle_type: VehicleType | None = None

    @field_validator("vehicle_type", mode="before")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Пассажиры присылают пустой тип транспорта."""
        return None if v == "" else v


class ProfileResponse(CamelModel):
    """Ответ GET /profile."""

    profile: ProfileDTO


class ProfileUpdateResponse(CamelModel):
    """Ответ PUT /profile."""

    success: bool = True
    profile: ProfileDTO
