from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from maasin_go.common.constants import UserRole
from maasin_go.services.dependencies import get_current_identity, get_presence_registry, get_profile_service
from maasin_go.services.presence.service import PresenceRegistry
from maasin_go.services.profiles.service import ProfileService
from maasin_go.shared.models.driver_dto import PublishResponse, SnapshotResponse
from maasin_go.shared.models.user_dto import Identity

router = APIRouter(tags=["presence"])


@router.post("/driver/update", response_model=PublishResponse)
async def publish_driver_status(
    identity: Annotated[Identity | None, Depends(get_current_identity)],
    registry: Annotated[PresenceRegistry, Depends(get_presence_registry)],
    profiles: Annotated[ProfileService, Depends(get_profile_service)],
    update: Annotated[Any, Body()] = None,
) -> PublishResponse:
    """
    Водитель публикует статус, маршрут и координаты.
    Тело проверяется реестром после личности и роли.
    """
    display_name = None
    if identity is not None and identity.role == UserRole.DRIVER:
        display_name = await profiles.get_display_name(identity.user_id)
    driver = await registry.publish(identity, update, display_name=display_name)
    return PublishResponse(driver=driver)


@router.get("/drivers", response_model=SnapshotResponse)
async def list_drivers(
    registry: Annotated[PresenceRegistry, Depends(get_presence_registry)],
    vehicle_type: Annotated[str | None, Query(alias="vehicleType")] = None,
) -> SnapshotResponse:
    """Снимок активных водителей, опционально по типу транспорта."""
    drivers = await registry.snapshot(vehicle_type)
    return SnapshotResponse(drivers=drivers)
