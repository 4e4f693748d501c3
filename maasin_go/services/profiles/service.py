"""
Сервис профилей пользователей.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from maasin_go.common.constants import TypeMsg
from maasin_go.common.errors import NotFoundError, Unauthenticated, ValidationError
from maasin_go.common.logger import log_info
from maasin_go.services.profiles.repository import ProfileRepository
from maasin_go.shared.models.common import parse_payload
from maasin_go.shared.models.user_dto import Identity, ProfileDTO, UpdateProfileRequest, UserDTO


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileService:
    def __init__(
        self,
        repository: ProfileRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self._clock = clock

    async def create_profile(self, user: UserDTO) -> ProfileDTO:
        """Создаёт профиль сразу после регистрации."""
        profile = ProfileDTO(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=self._clock(),
        )
        await self.repository.save(profile)
        await log_info(f"Создан профиль {user.id}", type_msg=TypeMsg.DEBUG)
        return profile

    async def get_profile(self, identity: Identity | None) -> ProfileDTO:
        """
        Профиль вызывающего.

        Raises:
            Unauthenticated: нет личности
            NotFoundError: профиль не создавался
        """
        if identity is None:
            raise Unauthenticated("Unauthorized")

        profile = await self.repository.get(identity.user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def get_display_name(self, user_id: str) -> str | None:
        """Имя из профиля для записи водителя (None, если профиля нет)."""
        profile = await self.repository.get(user_id)
        if profile is None:
            return None
        return profile.name or None

    async def update_profile(
        self,
        identity: Identity | None,
        update: UpdateProfileRequest | Mapping[str, Any],
    ) -> ProfileDTO:
        """
        Обновляет имя, номер и тип транспорта.
        Роль через этот метод не меняется.

        Raises:
            Unauthenticated: нет личности
            ValidationError: некорректное тело или пустое имя
        """
        if identity is None:
            raise Unauthenticated("Unauthorized")

        update = parse_payload(UpdateProfileRequest, update, "profile update")
        changes = update.model_dump(exclude_unset=True)
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Name must not be empty")

        now = self._clock()
        existing = await self.repository.get(identity.user_id)
        if existing is None:
            # Профиль мог не создаться при регистрации
            existing = ProfileDTO(
                id=identity.user_id,
                email=identity.email,
                name=identity.name or "Unknown",
                role=identity.role,
                created_at=now,
            )

        profile = existing.model_copy(update={**changes, "updated_at": now})
        await self.repository.save(profile)

        await log_info(
            f"Профиль {identity.user_id} обновлён: {', '.join(sorted(changes)) or 'без изменений'}",
            type_msg=TypeMsg.DEBUG,
        )
        return profile
