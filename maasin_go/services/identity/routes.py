from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from maasin_go.services.dependencies import get_account_service
from maasin_go.services.identity.service import AccountService
from maasin_go.shared.models.user_dto import LoginRequest, SignupRequest, SignupResponse, TokenResponse

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=SignupResponse)
async def signup(
    request: SignupRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> SignupResponse:
    user = await service.signup(request)
    return SignupResponse(user=user)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    """Вход по email и паролю, возвращает bearer-токен."""
    return await service.login(request)
