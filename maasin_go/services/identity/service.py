"""
Регистрация и вход пользователей.
"""

from __future__ import annotations

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from maasin_go.common.constants import TypeMsg, UserRole
from maasin_go.common.errors import ValidationError
from maasin_go.common.logger import log_info
from maasin_go.services.identity.provider import IdentityProvider
from maasin_go.services.profiles.service import ProfileService
from maasin_go.shared.models.user_dto import LoginRequest, SignupRequest, TokenResponse, UserDTO

_email_adapter = TypeAdapter(EmailStr)


class AccountService:
    """Учётные записи: провайдер идентификации + профиль в хранилище."""

    def __init__(
        self,
        provider: IdentityProvider,
        profiles: ProfileService,
        *,
        min_password_length: int = 6,
    ) -> None:
        self.provider = provider
        self.profiles = profiles
        self.min_password_length = min_password_length

    async def signup(self, request: SignupRequest) -> UserDTO:
        """
        Регистрирует пользователя и создаёт его профиль.

        Raises:
            ValidationError: поле отсутствует или некорректно, email занят
            StoreUnavailable: сбой хранилища
        """
        missing = [
            field
            for field in ("email", "password", "name", "role")
            if not (getattr(request, field) or "").strip()
        ]
        if missing:
            raise ValidationError("Missing required fields", details={"fields": missing})

        try:
            email = _email_adapter.validate_python(request.email.strip()).lower()
        except PydanticValidationError as e:
            raise ValidationError("Invalid email address", details={"fields": ["email"]}) from e

        if len(request.password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters",
                details={"fields": ["password"]},
            )

        try:
            role = UserRole(request.role)
        except ValueError:
            raise ValidationError(
                f"Unknown role '{request.role}'. Allowed: passenger, driver",
                details={"fields": ["role"]},
            )

        user = await self.provider.create_user(email, request.password, request.name.strip(), role)
        await self.profiles.create_profile(user)

        await log_info(f"Зарегистрирован {role} {user.id}", type_msg=TypeMsg.INFO)
        return user

    async def login(self, request: LoginRequest) -> TokenResponse:
        """
        Выдаёт bearer-токен по email и паролю.

        Raises:
            Unauthenticated: неверные учётные данные
        """
        user = await self.provider.authenticate(request.email, request.password)
        token = self.provider.issue_token(user)
        return TokenResponse(access_token=token, user=user)
