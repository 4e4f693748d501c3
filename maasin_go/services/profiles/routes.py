from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from maasin_go.services.dependencies import get_current_identity, get_profile_service
from maasin_go.services.profiles.service import ProfileService
from maasin_go.shared.models.user_dto import Identity, ProfileResponse, ProfileUpdateResponse

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    identity: Annotated[Identity | None, Depends(get_current_identity)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> ProfileResponse:
    return ProfileResponse(profile=await service.get_profile(identity))


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    identity: Annotated[Identity | None, Depends(get_current_identity)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
    payload: Annotated[Any, Body()] = None,
) -> ProfileUpdateResponse:
    """Обновить имя, номер и тип транспорта."""
    profile = await service.update_profile(identity, payload)
    return ProfileUpdateResponse(profile=profile)
