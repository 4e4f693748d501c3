"""
Хранение профилей пользователей.
Ключ профиля: user:{user_id}.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from maasin_go.common.constants import USER_KEY_PREFIX
from maasin_go.common.logger import log_warning
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.shared.models.user_dto import ProfileDTO


class ProfileRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key(user_id: str) -> str:
        return f"{USER_KEY_PREFIX}{user_id}"

    async def get(self, user_id: str) -> ProfileDTO | None:
        raw = await self.store.get(self.key(user_id))
        if raw is None:
            return None
        try:
            return ProfileDTO.model_validate_json(raw)
        except PydanticValidationError as e:
            await log_warning(
                f"Повреждённый профиль {user_id}: {e.error_count()} ошибок",
                extra={"user_id": user_id},
            )
            return None

    async def save(self, profile: ProfileDTO) -> None:
        await self.store.set(self.key(profile.id), profile.model_dump_json(by_alias=True))
