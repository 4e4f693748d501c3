# maasin_go/services/identity/provider.py
"""
Провайдер идентификации.

Выпускает bearer-токены (JWT) с id пользователя и ролью, проверяет их.
Учётные записи хранятся в хранилище ключ-значение под auth:account:{email},
пароли: bcrypt-хэши.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Protocol

import bcrypt
from jose import JWTError, jwt

from maasin_go.common.constants import ACCOUNT_KEY_PREFIX, TypeMsg, UserRole
from maasin_go.common.errors import Unauthenticated, ValidationError
from maasin_go.common.logger import log_info, log_warning
from maasin_go.infra.kv_store import KeyValueStore, dumps
from maasin_go.shared.models.user_dto import Identity, UserDTO

# bcrypt учитывает только первые 72 байта пароля
BCRYPT_MAX_BYTES = 72


class IdentityProvider(Protocol):
    """Внешний провайдер идентификации, которым пользуются сервисы."""

    async def create_user(self, email: str, password: str, name: str, role: UserRole) -> UserDTO:
        ...

    async def authenticate(self, email: str, password: str) -> UserDTO:
        ...

    def issue_token(self, user: UserDTO) -> str:
        ...

    def verify_token(self, token: str | None) -> Identity:
        ...


def hash_password(password: str, rounds: int = 12) -> str:
    """Хэширует пароль bcrypt (длинные пароли обрезаются до 72 байт)."""
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Проверяет пароль против bcrypt-хэша."""
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("ascii"))
    except ValueError:
        return False


class JwtIdentityProvider:
    """
    Реализация провайдера поверх хранилища ключ-значение.

    Роль фиксируется при регистрации и попадает в claim `role` токена.
    """

    def __init__(
        self,
        store: KeyValueStore,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        token_ttl_minutes: int = 60 * 24,
        bcrypt_rounds: int = 12,
    ) -> None:
        if not secret_key:
            raise RuntimeError("JWT_SECRET_KEY не задан. Укажите его в окружении или config.json")
        self.store = store
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._token_ttl = timedelta(minutes=token_ttl_minutes)
        self._bcrypt_rounds = bcrypt_rounds

    @staticmethod
    def account_key(email: str) -> str:
        return f"{ACCOUNT_KEY_PREFIX}{email.strip().lower()}"

    async def create_user(self, email: str, password: str, name: str, role: UserRole) -> UserDTO:
        """
        Создаёт учётную запись.

        Raises:
            ValidationError: email уже зарегистрирован
            StoreUnavailable: сбой хранилища
        """
        user = UserDTO(id=str(uuid.uuid4()), email=email.strip().lower(), name=name, role=role)
        password_hash = await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)

        account = {
            "userId": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role.value,
            "passwordHash": password_hash,
        }
        created = await self.store.add(self.account_key(email), dumps(account))
        if not created:
            raise ValidationError("A user with this email address has already been registered")

        await log_info(
            f"Создана учётная запись {user.id} ({user.role})",
            type_msg=TypeMsg.INFO,
            extra={"user_id": user.id},
        )
        return user

    async def authenticate(self, email: str, password: str) -> UserDTO:
        """
        Проверяет email и пароль.

        Raises:
            Unauthenticated: неверные учётные данные
        """
        raw = await self.store.get(self.account_key(email))
        if raw is None:
            raise Unauthenticated("Invalid login credentials")

        account = json.loads(raw)
        valid = await asyncio.to_thread(verify_password, password, account.get("passwordHash", ""))
        if not valid:
            await log_warning("Неудачная попытка входа", extra={"user_id": account.get("userId")})
            raise Unauthenticated("Invalid login credentials")

        return UserDTO(
            id=account["userId"],
            email=account["email"],
            name=account["name"],
            role=UserRole(account["role"]),
        )

    def issue_token(self, user: UserDTO) -> str:
        """Выпускает bearer-токен с id пользователя и ролью."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "role": user.role.value,
            "name": user.name,
            "email": user.email,
            "iat": now,
            "exp": now + self._token_ttl,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify_token(self, token: str | None) -> Identity:
        """
        Проверяет bearer-токен.

        Raises:
            Unauthenticated: токен отсутствует, подделан, истёк или без роли
        """
        if not token:
            raise Unauthenticated("Unauthorized")

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            raise Unauthenticated("Unauthorized") from e

        user_id = payload.get("sub")
        try:
            role = UserRole(payload.get("role"))
        except ValueError as e:
            raise Unauthenticated("Unauthorized") from e
        if not user_id:
            raise Unauthenticated("Unauthorized")

        return Identity(
            user_id=user_id,
            role=role,
            name=payload.get("name"),
            email=payload.get("email"),
        )
