"""
Идентификация: регистрация, вход, проверка bearer-токенов.
"""

from maasin_go.services.identity.provider import IdentityProvider, JwtIdentityProvider
from maasin_go.services.identity.service import AccountService

__all__ = ["AccountService", "IdentityProvider", "JwtIdentityProvider"]
